import logging

from storefront.notifications.rules import NOTIFICATION_RULES
from storefront.notifications.channels import Channel
from storefront.notifications.events import OrderEvent
from storefront.services import email_service, telegram_service

logger = logging.getLogger(__name__)


def dispatch_order_event(*, event: OrderEvent, order) -> None:
    """
    Central post-commit notification dispatcher.

    ``order`` is a detached OrderRead snapshot. Each channel is attempted on
    its own: a failing channel is logged and the next one still runs.
    Nothing is raised to the caller.
    """

    rules = NOTIFICATION_RULES.get(event, {})

    # -------------------------
    # CUSTOMER EMAIL
    # -------------------------
    if rules.get(Channel.EMAIL_CUSTOMER) and order.customer_email:
        try:
            if event == OrderEvent.ORDER_PLACED:
                email_service.send_order_confirmation(order, order.customer_email)
            else:
                email_service.send_order_status_update(order, order.customer_email)
        except Exception:
            logger.exception(
                f"Customer email failed for order {order.order_number} ({event.value})"
            )

    # -------------------------
    # ADMIN TELEGRAM
    # -------------------------
    if rules.get(Channel.TELEGRAM_ADMIN):
        try:
            telegram_service.send_admin_alert(order)
        except Exception:
            logger.exception(
                f"Telegram alert failed for order {order.order_number} ({event.value})"
            )


def notify_order_placed(order) -> None:
    dispatch_order_event(event=OrderEvent.ORDER_PLACED, order=order)


def notify_status_changed(order) -> None:
    dispatch_order_event(event=OrderEvent.STATUS_CHANGED, order=order)
