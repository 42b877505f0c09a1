# checkout_api/schemas/orders.py
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


class OrderLine(BaseModel):
    name: str
    quantity: int
    price: float


class ShippingAddress(BaseModel):
    line1: Optional[str] = None
    line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class Order(BaseModel):
    id: str
    stripeSessionId: str
    customerEmail: str
    customerName: Optional[str] = None
    items: List[OrderLine] = Field(default_factory=list)
    totalAmount: float
    currency: str = "usd"
    paymentStatus: PaymentStatus = PaymentStatus.pending
    paymentIntentId: Optional[str] = None
    shippingAddress: Optional[ShippingAddress] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    createdAt: datetime
    updatedAt: datetime


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class OrderPage(BaseModel):
    orders: List[Order]
    pagination: Pagination


# ---- Request bodies ----------------------------------------------------------
# camelCase to match the storefront JSON exactly

class CheckoutItemIn(BaseModel):
    productId: Optional[int | str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    quantity: int = Field(..., ge=1)


class CreateCheckoutSessionIn(BaseModel):
    items: Optional[List[CheckoutItemIn]] = None
    customerEmail: Optional[str] = None
    successUrl: Optional[str] = None
    cancelUrl: Optional[str] = None


class ConfirmPaymentIn(BaseModel):
    sessionId: Optional[str] = None


class PaymentIntentIn(BaseModel):
    amount: Optional[float] = None
    currency: Optional[str] = None
    customerEmail: Optional[str] = None


# ---- Responses ---------------------------------------------------------------

class CheckoutSessionOut(BaseModel):
    sessionId: str
    url: Optional[str] = None
    orderId: str


class SessionStatusOut(BaseModel):
    status: Optional[str] = None
    paymentStatus: Optional[str] = None
    customerEmail: Optional[str] = None
    amountTotal: Optional[int] = None
    currency: Optional[str] = None
    order: Optional[Order] = None


class PaymentIntentOut(BaseModel):
    clientSecret: str
    paymentIntentId: str
