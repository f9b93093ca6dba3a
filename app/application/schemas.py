from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from datetime import datetime
from typing import Any, Optional

class CamelModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

class OrderCreate(BaseModel):
    # Lines are resolved by the cart summarizer; entries it cannot read are dropped
    cart: Optional[list[Any]] = None
    customer: Optional[dict[str, Any]] = None

class OrderItemRead(CamelModel):
    product_id: str
    title: str
    qty: int
    price: int
    seller_id: Optional[str] = None

class OrderRead(CamelModel):
    id: str
    items: list[OrderItemRead]
    total: int
    customer: dict[str, Any]
    status: str
    payment_status: str
    created_at: datetime
    payment_id: Optional[str] = None

class OrderCreated(CamelModel):
    order_id: str
    total: int
    items: list[OrderItemRead]
    status: str
    payment_status: str
    payment_url: str

class CodeRequest(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    role: Optional[str] = None

class CodeRequested(CamelModel):
    ok: bool = True
    user_id: int
    role: str

class CodeVerify(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    code: Optional[Any] = None

class UserRead(CamelModel):
    id: int
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    role: str
    is_verified: bool
    created_at: Optional[datetime] = None

class CodeVerified(CamelModel):
    ok: bool = True
    user: UserRead
    access_token: str
    token_type: str = "bearer"

class SellerRegister(CamelModel):
    name: Optional[str] = None
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None

class SellerRead(CamelModel):
    id: int
    name: str
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    instagram: Optional[str] = None
    website: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None

class StatusUpdate(BaseModel):
    status: Optional[str] = None
