# storefront/seed.py
"""Seed a local database with demo equipment: ``python -m storefront.seed``."""
import logging
from decimal import Decimal

from slugify import slugify
from sqlmodel import Session, select

from storefront.database import create_db_and_tables, engine
from storefront.models.product import Product

logger = logging.getLogger(__name__)

DEMO_PRODUCTS = [
    # name, sku, price, stock
    ("IP Camera 4MP Dome", "CAM-DOME-4MP", Decimal("4590.00"), 25),
    ("IP Camera 8MP Bullet", "CAM-BULLET-8MP", Decimal("8990.00"), 12),
    ("PTZ Camera 25x Zoom", "CAM-PTZ-25X", Decimal("32500.00"), 3),
    ("NVR 16 Channel", "NVR-16CH", Decimal("15990.00"), 8),
    ("PoE Switch 8 Port", "SW-POE-8", Decimal("5490.00"), 0),
]


def seed_products(session: Session) -> int:
    created = 0

    for name, sku, price, stock in DEMO_PRODUCTS:
        exists = session.exec(select(Product).where(Product.sku == sku)).first()
        if exists:
            continue

        session.add(Product(
            name=name,
            slug=slugify(name),
            sku=sku,
            price=price,
            stock=stock,
        ))
        created += 1

    session.commit()
    return created


def main():
    logging.basicConfig(level=logging.INFO)
    create_db_and_tables()

    with Session(engine) as session:
        created = seed_products(session)

    logger.info(f"Seeded {created} products")


if __name__ == "__main__":
    main()
