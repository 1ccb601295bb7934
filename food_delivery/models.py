from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from sqlmodel import Field, Relationship, SQLModel

ORDER_STATUSES = ("preparing", "on-the-way", "delivered")
PAYMENT_STATUSES = ("paid", "failed")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Restaurant(SQLModel, table=True):
    __tablename__ = "restaurants"

    id: str = Field(primary_key=True, max_length=50)
    name: str = Field(max_length=255)
    cuisine: Optional[str] = Field(default=None, max_length=255)
    rating: Decimal = Field(default=Decimal("0"), ge=0, le=5, max_digits=2, decimal_places=1, index=True)
    delivery_time: Optional[str] = Field(default=None, max_length=50)
    image: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    menu_items: List["MenuItem"] = Relationship(
        back_populates="restaurant",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class MenuItem(SQLModel, table=True):
    __tablename__ = "menu_items"

    id: str = Field(primary_key=True, max_length=50)
    restaurant_id: str = Field(foreign_key="restaurants.id", ondelete="CASCADE", index=True, max_length=50)
    name: str = Field(max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)

    restaurant: Optional[Restaurant] = Relationship(back_populates="menu_items")


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(primary_key=True, max_length=50)
    user_id: Optional[str] = Field(default=None, index=True, max_length=50)
    status: str = Field(default="preparing", max_length=20)
    total: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    estimated_time: Optional[str] = Field(default=None, max_length=50)
    payment_reference: Optional[str] = Field(default=None, unique=True, index=True, max_length=100)
    payment_status: Optional[str] = Field(default=None, max_length=20)
    created_at: datetime = Field(default_factory=utcnow, index=True)
    updated_at: datetime = Field(default_factory=utcnow)

    items: List["OrderItem"] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "OrderItem.id",
        },
    )


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", ondelete="CASCADE", index=True, max_length=50)
    # Not a foreign key: catalog items may be removed while orders keep their snapshot.
    item_id: str = Field(max_length=50)
    name: str = Field(max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    quantity: int = Field(ge=1)

    order: Optional[Order] = Relationship(back_populates="items")


__all__ = ["Restaurant", "MenuItem", "Order", "OrderItem", "ORDER_STATUSES", "PAYMENT_STATUSES"]
