"""
Pure order assembly: pricing and snapshots, no database access.

Everything the order needs is passed in, including the delivery-cost table,
so the same inputs always build the same order.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Mapping, NamedTuple, Optional

from storefront.models.order import Order, OrderStatus
from storefront.models.order_item import OrderItem
from storefront.models.product import Product
from storefront.models.user import User

TWO_PLACES = Decimal("0.01")


def to_money(value) -> Decimal:
    return Decimal(value).quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


class OrderLine(NamedTuple):
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PricingConfig:
    delivery_costs: Mapping[str, Decimal] = field(default_factory=dict)
    currency: str = "RUB"

    @classmethod
    def from_settings(cls, settings) -> "PricingConfig":
        return cls(
            delivery_costs={k: to_money(v) for k, v in settings.DELIVERY_COSTS.items()},
            currency=settings.CURRENCY,
        )

    def delivery_cost(self, method) -> Decimal:
        key = getattr(method, "value", method)
        # unknown methods ship free, same as pickup
        return to_money(self.delivery_costs.get(key, Decimal("0")))


@dataclass
class AssembledOrder:
    order: Order
    items: List[OrderItem]
    subtotal: Decimal
    delivery_cost: Decimal


def _value(v):
    return getattr(v, "value", v)


def build_item(product: Product, quantity: int) -> OrderItem:
    unit_price = to_money(product.price)

    return OrderItem(
        product_id=product.id,
        product=product,
        quantity=quantity,
        unit_price=unit_price,
        line_total=to_money(unit_price * quantity),
        snapshot={
            "name": product.name,
            "sku": product.sku,
            "price": str(unit_price),
        },
    )


def assemble_order(
    request,
    products: Dict[int, Product],
    lines: List[OrderLine],
    pricing: PricingConfig,
    user: Optional[User] = None,
) -> AssembledOrder:
    items = [build_item(products[line.product_id], line.quantity) for line in lines]

    subtotal = to_money(sum((item.line_total for item in items), Decimal("0")))
    delivery_cost = pricing.delivery_cost(request.delivery.method)
    total_amount = subtotal + delivery_cost

    contact = request.contact
    delivery = request.delivery
    payment = request.payment

    meta = {
        "payment_method": _value(payment.method),
        "subtotal": str(subtotal),
        "delivery_cost": str(delivery_cost),
    }

    billing_address = None
    if payment.company_inn or payment.company_name:
        meta["company_inn"] = payment.company_inn
        meta["company_name"] = payment.company_name
        billing_address = {
            "company_name": payment.company_name,
            "company_inn": payment.company_inn,
        }

    order = Order(
        status=OrderStatus.pending,
        total_amount=total_amount,
        currency=pricing.currency,
        customer_name=f"{contact.first_name} {contact.last_name}",
        customer_email=str(contact.email),
        customer_phone=contact.phone,
        shipping_address={
            "method": _value(delivery.method),
            "city": delivery.city,
            "address": delivery.address,
            "delivery_date": delivery.date,
        },
        billing_address=billing_address,
        comment=request.comment,
        meta=meta,
        user_id=user.id if user else None,
        items=items,
    )

    return AssembledOrder(
        order=order,
        items=items,
        subtotal=subtotal,
        delivery_cost=delivery_cost,
    )
