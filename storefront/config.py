from decimal import Decimal
from typing import Dict, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    postgres_user: str = "postgres"
    postgres_password: str = "postgres"
    postgres_db: str = "storefront"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # full URL wins over the postgres_* parts (sqlite in tests)
    DATABASE_URL: Optional[str] = None

    ENV: str = "local"
    LOG_LEVEL: str = "INFO"

    # orders
    ORDER_NUMBER_PREFIX: str = "ORD"
    ORDER_NUMBER_MAX_ATTEMPTS: int = 3
    CURRENCY: str = "RUB"
    DELIVERY_COSTS: Dict[str, Decimal] = {
        "courier": Decimal("500.00"),
        "pickup": Decimal("0.00"),
        "transport": Decimal("0.00"),
    }

    # email (Brevo)
    BREVO_API_KEY: Optional[str] = None
    MAIL_FROM: Optional[str] = None
    STORE_NAME: str = "Video Surveillance Store"
    EMAIL_MAX_RETRIES: int = 3

    # telegram admin alerts
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_ADMIN_CHAT_ID: Optional[str] = None
    ADMIN_PANEL_URL: str = "http://localhost:3000/admin"

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL

        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"

settings = Settings()
