from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.application.schemas import CodeRequest, CodeRequested, CodeVerified, CodeVerify, UserRead
from app.application.verification import VerificationService
from app.auth_local import create_access_token
from app.core_settings import Settings, get_settings
from app.domain.models import User
from app.infrastructure.db import get_db
from app.infrastructure.notifications import Notifier, get_notifier

router = APIRouter(prefix="/api/users", tags=["users"])

@router.post("/request-code", response_model=CodeRequested)
def request_code(
    payload: CodeRequest,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
):
    """Create or refresh the user and send a one-time code."""
    user = VerificationService(db, notifier, settings).request_code(
        email=payload.email,
        phone=payload.phone,
        full_name=payload.full_name,
        city=payload.city,
        role=payload.role,
    )
    return CodeRequested(user_id=user.id, role=user.role)

@router.post("/verify-code", response_model=CodeVerified)
def verify_code(
    payload: CodeVerify,
    db: Session = Depends(get_db),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
):
    user = VerificationService(db, notifier, settings).verify_code(
        payload.code, email=payload.email, phone=payload.phone
    )
    return CodeVerified(
        user=UserRead.model_validate(user),
        access_token=create_access_token(settings, user.id, user.role),
    )

@router.get("/me", response_model=UserRead)
def me(user: User = Depends(get_current_user)):
    return user
