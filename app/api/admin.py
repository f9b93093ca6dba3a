from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.api.deps import require_admin
from app.application.admin import AdminService
from app.application.schemas import OrderRead, SellerRead, StatusUpdate, UserRead
from app.infrastructure.db import get_db

router = APIRouter(prefix="/api/admin", tags=["admin"], dependencies=[Depends(require_admin)])

@router.get("/orders", response_model=list[OrderRead])
def list_orders(db: Session = Depends(get_db)):
    """All orders, newest first."""
    return AdminService(db).list_orders()

@router.get("/orders/{order_id}", response_model=OrderRead)
def get_order(order_id: str, db: Session = Depends(get_db)):
    return AdminService(db).get_order(order_id)

@router.patch("/orders/{order_id}", response_model=OrderRead)
def update_order_status(order_id: str, payload: StatusUpdate, db: Session = Depends(get_db)):
    return AdminService(db).set_order_status(order_id, payload.status)

@router.get("/users", response_model=list[UserRead])
def list_users(db: Session = Depends(get_db)):
    return AdminService(db).list_users()

@router.get("/sellers", response_model=list[SellerRead])
def list_sellers(db: Session = Depends(get_db)):
    return AdminService(db).list_sellers()

@router.get("/sellers/{seller_id}", response_model=SellerRead)
def get_seller(seller_id: int, db: Session = Depends(get_db)):
    return AdminService(db).get_seller(seller_id)

@router.patch("/sellers/{seller_id}", response_model=SellerRead)
def update_seller_status(seller_id: int, payload: StatusUpdate, db: Session = Depends(get_db)):
    return AdminService(db).set_seller_status(seller_id, payload.status)
