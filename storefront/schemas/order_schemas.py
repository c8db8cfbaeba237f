from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field

from storefront.models.order import OrderStatus, PaymentStatus


class DeliveryMethod(str, Enum):
    courier = "courier"
    pickup = "pickup"
    transport = "transport"


class PaymentMethod(str, Enum):
    cash = "cash"
    card = "card"
    transfer = "transfer"


# ---------- REQUEST ----------

class ContactInfo(BaseModel):
    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    email: EmailStr
    phone: str = Field(pattern=r"^\+7\d{10}$")


class DeliveryInfo(BaseModel):
    method: DeliveryMethod
    city: str = Field(min_length=2)
    address: Optional[str] = None
    date: Optional[str] = None


class PaymentInfo(BaseModel):
    method: PaymentMethod
    company_inn: Optional[str] = None
    company_name: Optional[str] = None


class OrderItemRequest(BaseModel):
    product_id: int
    # checked by order_service.validate_line_items, so non-HTTP callers get
    # the same ValidationError
    quantity: int


class PlaceOrderRequest(BaseModel):
    contact: ContactInfo
    delivery: DeliveryInfo
    payment: PaymentInfo
    items: List[OrderItemRequest]
    comment: Optional[str] = None


class StatusUpdate(BaseModel):
    status: OrderStatus


class PaymentStatusUpdate(BaseModel):
    payment_status: PaymentStatus


# ---------- RESPONSE ----------

class ProductSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    sku: str


class OrderItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    product_id: Optional[int] = None
    product: Optional[ProductSummary] = None  # None once the product is deleted
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    snapshot: Optional[Dict[str, Any]] = None


class OrderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_number: str
    status: OrderStatus
    total_amount: Decimal
    currency: str

    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    shipping_address: Optional[Dict[str, Any]] = None
    billing_address: Optional[Dict[str, Any]] = None
    comment: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        default=None, validation_alias=AliasChoices("meta", "metadata")
    )

    user_id: Optional[int] = None
    items: List[OrderItemRead] = []
    created_at: datetime


class OrderListResponse(BaseModel):
    total_items: int
    total_pages: int
    current_page: int
    limit: int
    results: List[OrderRead]
