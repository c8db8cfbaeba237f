from enum import Enum


class OrderEvent(str, Enum):
    ORDER_PLACED = "order_placed"
    STATUS_CHANGED = "status_changed"
