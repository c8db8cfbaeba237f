from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON, Text
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from enum import Enum

from storefront.models.order_item import OrderItem
from storefront.models.user import User
from storefront.utils.dates import utcnow


class OrderStatus(str, Enum):
    draft = "draft"
    pending = "pending"
    paid = "paid"
    shipped = "shipped"
    completed = "completed"
    cancelled = "cancelled"


class PaymentStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    failed = "failed"
    refunded = "refunded"


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_number: Optional[str] = Field(default=None, max_length=40, unique=True, nullable=False)

    status: OrderStatus = Field(default=OrderStatus.pending)

    total_amount: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    currency: str = Field(default="RUB", max_length=8)

    # customer snapshot, copied from the request
    customer_name: Optional[str] = Field(default=None, max_length=120)
    customer_email: Optional[str] = Field(default=None, max_length=120)
    customer_phone: Optional[str] = Field(default=None, max_length=32)

    shipping_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    billing_address: Optional[dict] = Field(default=None, sa_column=Column(JSON))
    comment: Optional[str] = Field(default=None, sa_column=Column(Text))

    # payment method, delivery cost, company billing, payment status
    meta: Optional[dict] = Field(default=None, sa_column=Column("metadata", JSON))

    # NULL for guest checkout
    user_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utcnow},
    )

    # relationships (never lazy-loaded in services, see order_service.ORDER_RELATIONS)
    user: Optional[User] = Relationship()
    items: List[OrderItem] = Relationship(
        back_populates="order",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )

    @property
    def subtotal(self) -> Decimal:
        return sum((item.line_total for item in self.items), Decimal("0.00"))

    @property
    def delivery_cost(self) -> Decimal:
        return Decimal((self.meta or {}).get("delivery_cost", "0.00"))
