from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.deps import get_current_user
from app.application.schemas import SellerRead, SellerRegister
from app.application.sellers import SellerService
from app.domain.models import User
from app.infrastructure.db import get_db

router = APIRouter(prefix="/api/sellers", tags=["sellers"])

@router.post("/register", response_model=SellerRead, status_code=201)
def register_seller(payload: SellerRegister, db: Session = Depends(get_db)):
    """New sellers start as pending until an admin approves them."""
    return SellerService(db).register(payload)

@router.get("/my", response_model=list[SellerRead])
def my_sellers(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return SellerService(db).list_for_user(user)
