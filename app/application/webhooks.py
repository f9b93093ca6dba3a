"""Payment webhook reconciliation.

The provider delivers events at least once and in no particular order, so the
handler is a plain overwrite keyed by ``metadata.orderId``: replaying an event
leaves the same state, and whichever event is processed last wins.
"""

from typing import Any, Optional

from sqlalchemy.orm import Session

from app.domain.models import Order
from shared.core import get_logger, set_request_context

logger = get_logger(__name__)

OK = "ok"
IGNORED = "ignored"
ERROR = "error"

PROVIDER_STATUS_MAP = {
    "succeeded": "paid",
    "canceled": "canceled",
}

# Set by an admin after payment; a late or replayed event must not undo them
FULFILLMENT_STATUSES = {"shipped", "completed"}


def map_provider_status(provider_status: Optional[str], current: str) -> str:
    """Order status implied by a provider status; unknown ones keep ``current``."""
    if current in FULFILLMENT_STATUSES:
        return current
    return PROVIDER_STATUS_MAP.get(provider_status or "", current)


def _payment_object(event: Any) -> dict:
    if not isinstance(event, dict):
        return {}
    obj = event.get("object")
    return obj if isinstance(obj, dict) else {}


def extract_order_id(event: Any) -> Optional[str]:
    metadata = _payment_object(event).get("metadata")
    if not isinstance(metadata, dict):
        return None
    order_id = metadata.get("orderId")
    return str(order_id) if order_id else None


def reconcile_payment_event(db: Session, event: Any) -> str:
    """
    Apply one provider event to its order.

    Returns ``"ok"`` when the order was written and ``"ignored"`` when the event
    carries no order id or names an unknown order. Store errors propagate; the
    HTTP layer turns them into an ``"error"`` acknowledgement.
    """
    order_id = extract_order_id(event)
    if not order_id:
        logger.info("Webhook without metadata.orderId ignored")
        return IGNORED

    set_request_context(order_id=order_id)
    order = db.get(Order, order_id)
    if order is None:
        logger.info(f"Webhook for unknown order {order_id} ignored")
        return IGNORED

    payment = _payment_object(event)
    provider_status = payment.get("status")
    previous = order.status

    order.status = map_provider_status(provider_status, order.status)
    if provider_status is not None:
        order.payment_status = str(provider_status)
    if payment.get("id"):
        order.payment_id = str(payment["id"])
    db.commit()

    logger.info(
        f"Order {order_id} reconciled: {previous} -> {order.status}",
        extra={'extra_fields': {'payment_status': order.payment_status, 'event': event.get("event")}},
    )
    return OK
