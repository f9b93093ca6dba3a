from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from app.core_settings import Settings
from app.domain.catalog import StaticCatalog
from app.domain.errors import OrderNotFound, OrderIdExhausted, PaymentLinkMissing
from app.domain.models import Order, OrderItem
from app.infrastructure.payments import PaymentGateway, PaymentRequest, format_amount
from .cart import CartSummary, summarize_cart
from .schemas import OrderCreated, OrderItemRead
from shared.core import get_logger, set_request_context
from typing import Any, Callable, Optional
import random

logger = get_logger(__name__)

def generate_order_id() -> str:
    """SO- followed by exactly six digits."""
    return f"SO-{random.randint(100000, 999999)}"

class OrderService:
    def __init__(
        self,
        db: Session,
        catalog: StaticCatalog,
        settings: Settings,
        gateway: Optional[PaymentGateway] = None,
        id_factory: Callable[[], str] = generate_order_id,
    ):
        self.db = db
        self.catalog = catalog
        self.gateway = gateway
        self.settings = settings
        self.id_factory = id_factory

    def get(self, order_id: str) -> Order:
        order = self.db.execute(
            select(Order).options(selectinload(Order.items)).where(Order.id == order_id)
        ).scalar_one_or_none()
        if order is None:
            raise OrderNotFound()
        return order

    def _persist(self, summary: CartSummary, customer: dict) -> Order:
        """Write the order and its items in one transaction, retrying on id collisions."""
        for attempt in range(1, self.settings.ORDER_ID_ATTEMPTS + 1):
            order = Order(
                id=self.id_factory(),
                total=summary.total,
                status="pending",
                payment_status="pending",
                customer=customer,
                items=[
                    OrderItem(
                        product_id=i.product_id,
                        title=i.title,
                        price=i.price,
                        qty=i.qty,
                        seller_id=i.seller_id,
                    )
                    for i in summary.items
                ],
            )
            self.db.add(order)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.warning(f"Order id {order.id} already taken (attempt {attempt})")
                continue
            return order
        raise OrderIdExhausted()

    def _receipt(self, summary: CartSummary, customer: dict) -> dict:
        return {
            "customer": {"email": customer.get("email") or self.settings.PLACEHOLDER_EMAIL},
            "items": [
                {
                    "description": i.title or "Item",
                    "quantity": i.qty,
                    "amount": {"value": format_amount(i.price), "currency": self.settings.CURRENCY},
                    "vat_code": self.settings.VAT_CODE,
                }
                for i in summary.items
            ],
        }

    def create(self, cart: Optional[list[Any]], customer: Optional[dict] = None) -> OrderCreated:
        summary = summarize_cart(self.catalog, cart)
        customer = customer or {"type": "guest"}

        order = self._persist(summary, customer)
        set_request_context(order_id=order.id)
        logger.info(
            f"Order {order.id} created",
            extra={'extra_fields': {'total': order.total, 'items': len(summary.items)}},
        )

        # From here on the order row stays, whatever the provider does
        link = self.gateway.create_payment(PaymentRequest(
            order_id=order.id,
            amount=summary.total,
            currency=self.settings.CURRENCY,
            description=f"Sello: order {order.id}",
            return_url=self.settings.YOOKASSA_RETURN_URL,
            receipt=self._receipt(summary, customer),
        ))

        if not link.confirmation_url:
            logger.error(f"No confirmation_url for order {order.id}", extra={'extra_fields': {'payment_id': link.payment_id}})
            raise PaymentLinkMissing()

        # Only payment_id is written so a webhook that already landed keeps its status
        if link.payment_id:
            self.db.execute(
                update(Order).where(Order.id == order.id).values(payment_id=link.payment_id)
            )
            self.db.commit()

        return OrderCreated(
            order_id=order.id,
            total=summary.total,
            items=[
                OrderItemRead(
                    product_id=i.product_id,
                    title=i.title,
                    qty=i.qty,
                    price=i.price,
                    seller_id=i.seller_id,
                )
                for i in summary.items
            ],
            status=order.status,
            payment_status=order.payment_status,
            payment_url=link.confirmation_url,
        )
