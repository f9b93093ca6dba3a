from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload
from app.domain.errors import InvalidStatus, OrderNotFound, SellerNotFound
from app.domain.models import Order, Seller, User, ORDER_STATUSES, SELLER_STATUSES
from shared.core import get_logger, set_request_context
from typing import Optional

logger = get_logger(__name__)

class AdminService:
    def __init__(self, db: Session):
        self.db = db

    def list_orders(self) -> list[Order]:
        stmt = (
            select(Order)
            .options(selectinload(Order.items))
            .order_by(Order.created_at.desc(), Order.id.desc())
        )
        return list(self.db.execute(stmt).scalars())

    def get_order(self, order_id: str) -> Order:
        order = self.db.get(Order, order_id, options=[selectinload(Order.items)])
        if order is None:
            raise OrderNotFound()
        return order

    def set_order_status(self, order_id: str, status: Optional[str]) -> Order:
        # Any allowed status may follow any other; no transition matrix is enforced
        if status not in ORDER_STATUSES:
            raise InvalidStatus(f"Status must be one of: {', '.join(ORDER_STATUSES)}")
        order = self.get_order(order_id)
        set_request_context(order_id=order.id)
        previous = order.status
        order.status = status
        self.db.commit()
        logger.info(f"Admin moved order {order.id}: {previous} -> {status}")
        return order

    def list_users(self) -> list[User]:
        return list(self.db.execute(select(User).order_by(User.created_at.desc(), User.id.desc())).scalars())

    def list_sellers(self) -> list[Seller]:
        return list(self.db.execute(select(Seller).order_by(Seller.created_at.desc(), Seller.id.desc())).scalars())

    def get_seller(self, seller_id: int) -> Seller:
        seller = self.db.get(Seller, seller_id)
        if seller is None:
            raise SellerNotFound()
        return seller

    def set_seller_status(self, seller_id: int, status: Optional[str]) -> Seller:
        if status not in SELLER_STATUSES:
            raise InvalidStatus(f"Status must be one of: {', '.join(SELLER_STATUSES)}")
        seller = self.get_seller(seller_id)
        previous = seller.status
        seller.status = status
        self.db.commit()
        logger.info(f"Admin moved seller {seller.id}: {previous} -> {status}")
        return seller
