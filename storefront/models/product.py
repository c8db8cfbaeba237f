from sqlmodel import SQLModel, Field
from sqlalchemy import CheckConstraint, DateTime
from typing import Optional
from decimal import Decimal
from datetime import datetime

from storefront.utils.dates import utcnow


class Product(SQLModel, table=True):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_products_stock_non_negative"),
    )

    #main info
    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=150)
    slug: str = Field(max_length=160, unique=True)
    sku: str = Field(max_length=80, unique=True)

    #Shop Details
    price: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    currency: str = Field(default="RUB", max_length=8)
    stock: int = Field(default=0)  # single source of truth for availability
    is_active: bool = True

    #timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utcnow},
    )
