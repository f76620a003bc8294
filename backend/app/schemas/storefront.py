"""Storefront Schemas — products, coupons and orders.

Invariants:
    - Coupon codes uppercased; discount_percentage in 1..100
    - Order items carry product ids and quantities only; prices come from the database
"""

from datetime import datetime
from typing import Annotated
from uuid import UUID

from pydantic import AfterValidator, BaseModel, EmailStr, Field

from app.core.domain_types import OrderStatus, ProductStatus
from app.schemas.common import OrmModel


def _upper(v: str) -> str:
    return v.strip().upper()


CouponCode = Annotated[str, Field(min_length=1, max_length=50), AfterValidator(_upper)]


class ProductOut(OrmModel):
    id: UUID
    name: str
    slug: str
    regular_price: float
    sale_price: float
    quantity: int
    in_stock: bool
    sale: bool
    is_featured: bool
    sizes: list = []
    description: dict = {}
    category: str | None = None
    sub_category: str | None = None
    images: list = []
    status: str
    views: int
    created_at: datetime


class ProductStatusUpdate(BaseModel):
    status: ProductStatus


class CouponCreate(BaseModel):
    code: CouponCode
    discount_percentage: int = Field(ge=1, le=100)
    expiry_date: datetime


class CouponOut(OrmModel):
    id: UUID
    code: str
    discount_percentage: int
    expiry_date: datetime
    is_used: bool


class CouponValidate(BaseModel):
    code: CouponCode
    order_total: float = Field(ge=0)


class OrderItemIn(BaseModel):
    product_id: UUID
    quantity: int = Field(1, ge=1, le=1000)


class DeliveryDetails(BaseModel):
    firstname: str = Field(min_length=1, max_length=100)
    lastname: str = Field(min_length=1, max_length=100)
    email: EmailStr
    number: str = Field(min_length=1, max_length=40)
    address: str = Field(min_length=1, max_length=500)
    state: str = Field(min_length=1, max_length=100)
    country: str = Field("Nigeria", max_length=100)
    zip_code: str | None = Field(None, max_length=20)
    note: str | None = Field(None, max_length=2000)


class OrderCreate(BaseModel):
    items: list[OrderItemIn] = Field(min_length=1)
    delivery_details: DeliveryDetails
    reference: str = Field(min_length=1, max_length=100)
    transaction_id: str | None = Field(None, max_length=100)
    coupon_code: CouponCode | None = None


class OrderOut(OrmModel):
    id: UUID
    user_id: UUID | None = None
    items: list
    delivery_details: dict
    coupon_code: str | None = None
    discount: float
    total: float
    payment_transaction_id: str | None = None
    payment_reference: str
    payment_status: str
    amount: float
    currency: str
    payment_method: str | None = None
    paid_at: datetime | None = None
    order_status: str
    created_at: datetime


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
