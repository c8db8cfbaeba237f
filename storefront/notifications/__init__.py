from .events import OrderEvent
from .dispatcher import dispatch_order_event, notify_order_placed, notify_status_changed

__all__ = [
    "OrderEvent",
    "dispatch_order_event",
    "notify_order_placed",
    "notify_status_changed",
]
