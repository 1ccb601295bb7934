from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .models import Order


class HealthResponse(BaseModel):
    status: str
    message: str


class RestaurantRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    cuisine: Optional[str] = None
    rating: float
    delivery_time: Optional[str] = None
    image: Optional[str] = None


class MenuItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    restaurant_id: str
    name: str
    description: Optional[str] = None
    price: float
    image: Optional[str] = None


class OrderItemIn(BaseModel):
    id: str
    name: Optional[str] = None
    price: Optional[float] = None
    quantity: int


class OrderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    items: List[OrderItemIn] = Field(default_factory=list)
    total: float
    user_id: Optional[str] = Field(default=None, alias="userId")
    payment_reference: Optional[str] = Field(default=None, alias="paymentReference")


class OrderItemRead(BaseModel):
    id: str
    name: str
    price: float
    quantity: int


class OrderRead(BaseModel):
    id: str
    user_id: Optional[str] = None
    status: str
    total: float
    estimated_time: Optional[str] = None
    estimatedTime: Optional[str] = None
    payment_reference: Optional[str] = None
    payment_status: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemRead]

    @classmethod
    def from_order(cls, order: Order) -> "OrderRead":
        return cls(
            id=order.id,
            user_id=order.user_id,
            status=order.status,
            total=order.total,
            estimated_time=order.estimated_time,
            estimatedTime=order.estimated_time,
            payment_reference=order.payment_reference,
            payment_status=order.payment_status,
            created_at=order.created_at,
            updated_at=order.updated_at,
            items=[
                OrderItemRead(id=item.item_id, name=item.name, price=item.price, quantity=item.quantity)
                for item in order.items
            ],
        )


class OrderStatusUpdate(BaseModel):
    status: str


class PaymentInitRequest(BaseModel):
    email: Optional[str] = None
    amount: Optional[float] = None
    orderId: Optional[str] = None
    items: Optional[List[Any]] = None


class PaymentInitResponse(BaseModel):
    authorizationUrl: str
    accessCode: str
    reference: str


class PaymentVerificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    amount: float
    currency: Optional[str] = None
    reference: str
    paid_at: Optional[str] = None
    customer: Optional[dict] = None
    metadata: Any = None


class TransactionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reference: str
    amount: float
    status: str
    paid_at: Optional[str] = None
    customer: Optional[dict] = None


class TransactionListResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    transactions: List[TransactionRead]
    meta: dict


class RefundRequest(BaseModel):
    reference: Optional[str] = None
    amount: Optional[float] = None


class RefundRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reference: str
    amount: float
    status: str
    message: str


class BankRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    code: str
    slug: Optional[str] = None


class BankListResponse(BaseModel):
    banks: List[BankRead]


class WebhookAck(BaseModel):
    received: bool
