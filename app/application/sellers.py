from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session
from app.domain.errors import ValidationError
from app.domain.models import Seller, User
from .schemas import SellerRegister
from .verification import normalize_email, normalize_phone
from shared.core import get_logger

logger = get_logger(__name__)

class SellerService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, data: SellerRegister) -> Seller:
        name = (data.name or "").strip()
        email, phone = normalize_email(data.email), normalize_phone(data.phone)
        if not name:
            raise ValidationError("Seller name is required")
        if not email and not phone:
            raise ValidationError("Email or phone is required")

        seller = Seller(
            name=name,
            contact_name=data.contact_name,
            email=email,
            phone=phone,
            city=data.city,
            description=data.description,
            instagram=data.instagram,
            website=data.website,
            status="pending",
        )
        self.db.add(seller)
        self.db.commit()
        self.db.refresh(seller)
        logger.info(f"Seller {seller.id} registered, awaiting moderation")
        return seller

    def list_for_user(self, user: User) -> list[Seller]:
        """Sellers registered with the user's e-mail or phone."""
        conditions = []
        if user.email:
            conditions.append(func.lower(Seller.email) == user.email.lower())
        if user.phone:
            conditions.append(Seller.phone == user.phone)
        if not conditions:
            return []
        stmt = select(Seller).where(or_(*conditions)).order_by(Seller.created_at.desc(), Seller.id.desc())
        return list(self.db.execute(stmt).scalars())
