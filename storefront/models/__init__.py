from storefront.models.user import User
from storefront.models.product import Product
from storefront.models.order_item import OrderItem
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.models.order_event import OrderEvent

# add ALL models here
