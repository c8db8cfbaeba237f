import logging

import requests

from storefront.config import settings
from storefront.utils.template import render_template

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org/bot{token}/sendMessage"

PAYMENT_METHOD_LABELS = {
    "cash": "Cash on delivery",
    "card": "Bank card",
    "transfer": "Bank transfer (company invoice)",
}


def is_configured() -> bool:
    return bool(settings.TELEGRAM_BOT_TOKEN and settings.TELEGRAM_ADMIN_CHAT_ID)


def payment_method_label(order) -> str:
    method = (order.metadata or {}).get("payment_method")
    if not method:
        return "Not specified"
    return PAYMENT_METHOD_LABELS.get(method, method)


def format_new_order_message(order) -> str:
    return render_template(
        "telegram/new_order.html",
        order=order,
        payment_method=payment_method_label(order),
    ).strip()


def send_admin_alert(order) -> bool:
    """Post a new-order alert to the admin chat. Raises on transport errors."""
    if not is_configured():
        logger.warning(
            "Telegram bot or admin chat ID not configured. Skipping notification."
        )
        return False

    payload = {
        "chat_id": settings.TELEGRAM_ADMIN_CHAT_ID,
        "text": format_new_order_message(order),
        "parse_mode": "HTML",
        "reply_markup": {
            "inline_keyboard": [
                [
                    {
                        "text": "View order",
                        "url": f"{settings.ADMIN_PANEL_URL}/orders/{order.id}",
                    }
                ]
            ]
        },
    }

    response = requests.post(
        TELEGRAM_API_URL.format(token=settings.TELEGRAM_BOT_TOKEN),
        json=payload,
        timeout=10,
    )
    response.raise_for_status()

    logger.info(
        f"Telegram notification sent for order {order.order_number} "
        f"to chat {settings.TELEGRAM_ADMIN_CHAT_ID}"
    )
    return True
