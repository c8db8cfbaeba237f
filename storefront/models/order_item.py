from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, DateTime, ForeignKey, Integer, JSON
from typing import Optional, TYPE_CHECKING
from decimal import Decimal
from datetime import datetime

from storefront.models.product import Product
from storefront.utils.dates import utcnow

if TYPE_CHECKING:
    from storefront.models.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("orders.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    # NULL once the product is deleted; the snapshot keeps the history
    product_id: Optional[int] = Field(
        default=None,
        sa_column=Column(
            Integer,
            ForeignKey("products.id", ondelete="SET NULL"),
            nullable=True,
            index=True,
        ),
    )

    quantity: int
    unit_price: Decimal = Field(max_digits=12, decimal_places=2)
    line_total: Decimal = Field(max_digits=12, decimal_places=2)
    snapshot: Optional[dict] = Field(default=None, sa_column=Column(JSON))

    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))

    order: Optional["Order"] = Relationship(back_populates="items")
    product: Optional[Product] = Relationship()
