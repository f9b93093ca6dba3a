"""Read-only product catalog.

The catalog is built once at startup (from the bundled demo data or a JSON
file) and handed to request handlers through ``app.state``; nothing mutates
it afterwards.
"""

import json
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Iterable, Optional


@dataclass(frozen=True)
class CatalogSeller:
    id: str
    name: str
    city: str


@dataclass(frozen=True)
class Product:
    id: str
    title: str
    brand: str
    price: int
    category: str
    seller_id: str
    colors: tuple[str, ...] = field(default_factory=tuple)
    sizes: tuple[str, ...] = field(default_factory=tuple)
    badge: Optional[str] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["sellerId"] = data.pop("seller_id")
        data["colors"] = list(self.colors)
        data["sizes"] = list(self.sizes)
        if self.badge is None:
            data.pop("badge")
        return data


class StaticCatalog:
    """In-memory catalog keyed by product id."""

    def __init__(self, products: Iterable[Product], sellers: Iterable[CatalogSeller]):
        self._products = tuple(products)
        self._sellers = tuple(sellers)
        self._by_id = {p.id: p for p in self._products}

    def get_product(self, product_id) -> Optional[Product]:
        if product_id is None:
            return None
        return self._by_id.get(str(product_id))

    def products(self) -> tuple[Product, ...]:
        return self._products

    def sellers(self) -> tuple[CatalogSeller, ...]:
        return self._sellers

    def to_dict(self) -> dict:
        return {
            "products": [p.to_dict() for p in self._products],
            "sellers": [asdict(s) for s in self._sellers],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StaticCatalog":
        products = [
            Product(
                id=str(p["id"]),
                title=p["title"],
                brand=p.get("brand", ""),
                price=int(p["price"]),
                category=p.get("category", ""),
                seller_id=str(p.get("sellerId") or p.get("seller_id")),
                colors=tuple(p.get("colors") or ()),
                sizes=tuple(p.get("sizes") or ()),
                badge=p.get("badge"),
            )
            for p in data.get("products", [])
        ]
        sellers = [
            CatalogSeller(id=str(s["id"]), name=s["name"], city=s.get("city", ""))
            for s in data.get("sellers", [])
        ]
        return cls(products, sellers)


DEMO_SELLERS = (
    CatalogSeller("s-01", "Store Matvey", "Москва"),
    CatalogSeller("s-02", "Borovsky Retail", "Санкт-Петербург"),
    CatalogSeller("s-03", "Zhuk Select", "Казань"),
)

DEMO_PRODUCTS = (
    Product("p-01", "Aether Runner V2", "Aether", 12990, "Кроссовки", "s-01",
            ("Белый", "Графит"), ("40", "41", "42", "43"), "Новинка"),
    Product("p-02", "Noir Shell Parka", "Noir", 24990, "Куртки", "s-02",
            ("Чёрный",), ("S", "M", "L"), "Хит"),
    Product("p-03", "Linea Tote 24", "Linea", 10990, "Сумки", "s-03",
            ("Песочный", "Олива"), ("OS",)),
    Product("p-04", "Vertex Raw Denim", "Vertex", 8990, "Джинсы", "s-01",
            ("Индиго",), ("30", "31", "32", "33")),
    Product("p-05", "Forma Minimal Cap", "Forma", 2990, "Аксессуары", "s-02",
            ("Серый", "Синий"), ("OS",), "-15%"),
    Product("p-06", "Aether Glide", "Aether", 11990, "Кроссовки", "s-03",
            ("Белый",), ("41", "42", "43")),
)


def load_catalog(path: Optional[str] = None) -> StaticCatalog:
    """Load the catalog from ``path`` or fall back to the demo data."""
    if not path:
        return StaticCatalog(DEMO_PRODUCTS, DEMO_SELLERS)
    with open(Path(path), encoding="utf-8") as f:
        return StaticCatalog.from_dict(json.load(f))
