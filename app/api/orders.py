from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.deps import get_catalog
from app.application.orders import OrderService
from app.application.schemas import OrderCreate, OrderCreated, OrderRead
from app.core_settings import Settings, get_settings
from app.domain.catalog import StaticCatalog
from app.infrastructure.db import get_db
from app.infrastructure.payments import PaymentGateway, get_payment_gateway

router = APIRouter(prefix="/api/orders", tags=["orders"])

@router.post("", response_model=OrderCreated)
def create_order(
    payload: OrderCreate,
    db: Session = Depends(get_db),
    catalog: StaticCatalog = Depends(get_catalog),
    gateway: PaymentGateway = Depends(get_payment_gateway),
    settings: Settings = Depends(get_settings),
):
    """Persist the order and return the provider's payment page URL."""
    return OrderService(db, catalog, settings, gateway).create(payload.cart, payload.customer)

@router.get("/{order_id}", response_model=OrderRead)
def get_order(
    order_id: str,
    db: Session = Depends(get_db),
    catalog: StaticCatalog = Depends(get_catalog),
    settings: Settings = Depends(get_settings),
):
    return OrderService(db, catalog, settings).get(order_id)
