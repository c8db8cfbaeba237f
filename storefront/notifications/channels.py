from enum import Enum


class Channel(str, Enum):
    EMAIL_CUSTOMER = "email_customer"
    TELEGRAM_ADMIN = "telegram_admin"
