import logging
import re
from typing import List, Union

import requests

from storefront.config import settings
from storefront.services.email_retry import send_email_with_retry
from storefront.utils.template import render_template

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


class EmailDeliveryError(Exception):
    pass


def is_valid_email(email):
    if isinstance(email, list):
        return all(is_valid_email(e) for e in email)

    if not email:
        return False

    return re.match(r"[^@]+@[^@]+\.[^@]+", email) is not None


def is_configured() -> bool:
    return bool(settings.BREVO_API_KEY and settings.MAIL_FROM)


def send_email(to: Union[str, List[str]], subject: str, html: str) -> None:
    """
    Send email via Brevo. Raises EmailDeliveryError on any failure so that
    send_email_with_retry can decide whether to try again.
    """

    # Normalize emails into a list
    if isinstance(to, list):
        valid_emails = [e for e in to if is_valid_email(e)]
    else:
        valid_emails = [to] if is_valid_email(to) else []

    if not valid_emails:
        raise EmailDeliveryError(f"No valid emails found: {to}")

    payload = {
        "sender": {
            "email": settings.MAIL_FROM,
            "name": settings.STORE_NAME,
        },
        "to": [{"email": e} for e in valid_emails],
        "subject": subject,
        "htmlContent": html,
    }

    headers = {
        "api-key": settings.BREVO_API_KEY,
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            BREVO_API_URL,
            json=payload,
            headers=headers,
            timeout=10,
        )
    except requests.RequestException as exc:
        raise EmailDeliveryError(f"Brevo request failed: {exc}") from exc

    if response.status_code >= 400:
        raise EmailDeliveryError(
            f"Brevo email failed ({response.status_code}): {response.text}"
        )

    logger.info(f"Brevo email sent to {valid_emails}")


def send_order_confirmation(order, customer_email: str) -> bool:
    """Send order confirmation email to customer"""
    if not is_configured():
        logger.warning(
            "Email transport not configured. Skipping order confirmation email."
        )
        return False

    html = render_template(
        "emails/order_confirmation.html",
        order=order,
        store_name=settings.STORE_NAME,
    )

    return send_email_with_retry(
        send_email,
        to_email=customer_email,
        subject=f"Order confirmed {order.order_number}",
        html=html,
        max_retries=settings.EMAIL_MAX_RETRIES,
    )


def send_order_status_update(order, customer_email: str) -> bool:
    if not is_configured():
        logger.warning(
            "Email transport not configured. Skipping order status update email."
        )
        return False

    html = render_template(
        "emails/order_status_update.html",
        order=order,
        store_name=settings.STORE_NAME,
    )

    return send_email_with_retry(
        send_email,
        to_email=customer_email,
        subject=f"Order {order.order_number}: {order.status.value}",
        html=html,
        max_retries=settings.EMAIL_MAX_RETRIES,
    )
