from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.core_settings import Settings
from app.domain.errors import (
    CodeExpired,
    CodeMismatch,
    CodeNotRequested,
    Conflict,
    UserNotFound,
    ValidationError,
)
from app.domain.models import User, utcnow
from app.infrastructure.notifications import Notifier
from shared.core import get_logger, set_request_context
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional
import secrets

logger = get_logger(__name__)

def normalize_email(email: Optional[str]) -> Optional[str]:
    email = (email or "").strip().lower()
    return email or None

def normalize_phone(phone: Optional[str]) -> Optional[str]:
    phone = (phone or "").strip()
    return phone or None

def generate_code() -> str:
    return f"{secrets.randbelow(900000) + 100000}"

def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone=True columns
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

class VerificationService:
    """Issues and checks one-time codes proving control of an e-mail or phone."""

    def __init__(
        self,
        db: Session,
        notifier: Notifier,
        settings: Settings,
        clock: Callable[[], datetime] = utcnow,
        code_factory: Callable[[], str] = generate_code,
    ):
        self.db = db
        self.notifier = notifier
        self.settings = settings
        self.clock = clock
        self.code_factory = code_factory

    def find_user(self, email: Optional[str] = None, phone: Optional[str] = None) -> Optional[User]:
        """Look a user up by e-mail (case-insensitive) when given, otherwise by phone."""
        email, phone = normalize_email(email), normalize_phone(phone)
        if email:
            stmt = select(User).where(func.lower(User.email) == email)
        elif phone:
            stmt = select(User).where(User.phone == phone)
        else:
            return None
        return self.db.execute(stmt).scalar_one_or_none()

    def request_code(
        self,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        full_name: Optional[str] = None,
        city: Optional[str] = None,
        role: Optional[str] = None,
    ) -> User:
        email, phone = normalize_email(email), normalize_phone(phone)
        if not email and not phone:
            raise ValidationError("Email or phone is required")

        code = self.code_factory()
        user = self.find_user(email=email, phone=phone)
        if user is None:
            user = User()
            self.db.add(user)

        # Latest request wins: profile is overwritten and verification reset.
        # A contact left out of the request keeps its stored value.
        user.full_name = full_name or None
        if email:
            user.email = email
        if phone:
            user.phone = phone
        user.city = city or None
        user.role = "seller" if role == "seller" else "buyer"
        user.is_verified = False
        user.verification_code = code
        user.verification_expires_at = self.clock() + timedelta(minutes=self.settings.VERIFICATION_CODE_TTL_MINUTES)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("Email or phone already belongs to another user") from e
        set_request_context(user_id=user.id)
        logger.info(f"Verification code issued for user {user.id}")

        message = (
            f"Sello Market verification code: {code}\n"
            f"It is valid for {self.settings.VERIFICATION_CODE_TTL_MINUTES} minutes."
        )
        if email:
            self.notifier.send_email(email, "Sello Market verification code", message)
        if phone:
            self.notifier.send_sms(phone, message)
        return user

    def verify_code(self, code, email: Optional[str] = None, phone: Optional[str] = None) -> User:
        if not normalize_email(email) and not normalize_phone(phone):
            raise ValidationError("Email or phone is required")
        user = self.find_user(email=email, phone=phone)
        if user is None:
            raise UserNotFound()
        set_request_context(user_id=user.id)

        if not user.verification_code or user.verification_expires_at is None:
            raise CodeNotRequested()
        if self.clock() > _aware(user.verification_expires_at):
            raise CodeExpired()
        if str(code if code is not None else "").strip() != user.verification_code.strip():
            raise CodeMismatch()

        user.is_verified = True
        user.verification_code = None
        user.verification_expires_at = None
        self.db.commit()
        logger.info(f"User {user.id} verified")
        return user

    def get_user(self, user_id: int) -> User:
        user = self.db.get(User, user_id)
        if user is None:
            raise UserNotFound()
        return user
