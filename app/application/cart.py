from dataclasses import dataclass
from typing import Any, Iterable, Optional

from app.domain.catalog import StaticCatalog
from app.domain.errors import EmptyCart, NoValidItems


@dataclass(frozen=True)
class CartItem:
    """A cart line resolved against the catalog at checkout time."""

    product_id: str
    title: str
    qty: int
    price: int
    seller_id: Optional[str]

    @property
    def subtotal(self) -> int:
        return self.qty * self.price


@dataclass(frozen=True)
class CartSummary:
    items: tuple[CartItem, ...]
    total: int


def parse_qty(value: Any) -> int:
    """Whole quantity >= 1; anything else counts as 1."""
    if isinstance(value, bool):
        return 1
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 1
    if not number.is_integer() or number < 1:
        return 1
    return int(number)


def _line_fields(line: Any) -> tuple[Any, Any]:
    if isinstance(line, dict):
        product_id = line.get("id", line.get("productId"))
        qty = line.get("qty", line.get("quantity"))
        return product_id, qty
    # Bare values, lists and nulls name no product
    return None, None


def summarize_cart(catalog: StaticCatalog, cart: Optional[Iterable[Any]]) -> CartSummary:
    """
    Resolve cart lines against the catalog and total them.

    Lines naming unknown products are dropped. Raises ``EmptyCart`` when
    nothing was sent and ``NoValidItems`` when nothing resolved.
    """
    lines = list(cart or [])
    if not lines:
        raise EmptyCart()

    items = []
    for line in lines:
        product_id, qty = _line_fields(line)
        product = catalog.get_product(product_id)
        if product is None:
            continue
        items.append(CartItem(
            product_id=product.id,
            title=product.title,
            qty=parse_qty(qty),
            price=int(product.price),
            seller_id=product.seller_id,
        ))

    if not items:
        raise NoValidItems()

    return CartSummary(items=tuple(items), total=sum(i.subtotal for i in items))
