import time
import random
import logging

logger = logging.getLogger(__name__)


def send_email_with_retry(
    send,
    to_email: str,
    subject: str,
    html: str,
    max_retries: int = 3,
    backoff: float = 1.0,
):
    last_error = None

    for attempt in range(1, max_retries + 1):
        try:
            send(
                to=to_email,
                subject=subject,
                html=html,
            )
            logger.info(f"Email sent to {to_email} (attempt {attempt})")
            return True

        except Exception as e:
            last_error = str(e)
            logger.warning(f"Attempt {attempt} failed: {last_error}")

            if "api-key" in last_error.lower() or "no valid emails" in last_error.lower():
                break  # auth or address error → no retry

            if attempt < max_retries:
                time.sleep(backoff * (2 ** attempt) + random.random())

    logger.error(f"Email permanently failed: {last_error}")
    return False
