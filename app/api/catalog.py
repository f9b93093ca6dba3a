from fastapi import APIRouter, Depends
from app.api.deps import get_catalog
from app.domain.catalog import StaticCatalog

router = APIRouter(prefix="/api", tags=["catalog"])

@router.get("/products")
def list_products(catalog: StaticCatalog = Depends(get_catalog)):
    """Products with the sellers that own them."""
    return catalog.to_dict()
