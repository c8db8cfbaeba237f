# storefront/services/inventory_service.py
import logging
from typing import Dict, Iterable, List

from sqlalchemy import update
from sqlmodel import Session, select

from storefront.exceptions import ConflictError, InsufficientStockError, NotFoundError
from storefront.models.product import Product

logger = logging.getLogger(__name__)


def load_products_by_ids(session: Session, ids: Iterable[int], lock: bool = False) -> List[Product]:
    """Batch read; ids that do not exist are simply absent from the result."""
    ids = sorted(set(ids))
    if not ids:
        return []

    # rows are locked in id order so two placements never deadlock
    query = select(Product).where(Product.id.in_(ids)).order_by(Product.id)
    if lock:
        query = query.with_for_update()

    return list(session.exec(query).all())


def validate_availability(session: Session, lines) -> Dict[int, Product]:
    """
    Check every line against current stock, inside the caller's transaction.

    This is the early exit that gives the customer a precise message.
    The safety net is reserve().
    """
    requested_ids = [line.product_id for line in lines]
    products = {
        p.id: p for p in load_products_by_ids(session, requested_ids, lock=True)
    }

    missing = [pid for pid in requested_ids if pid not in products]
    if missing:
        logger.info(f"Products not found: {missing}")
        raise NotFoundError(missing)

    for line in lines:
        product = products[line.product_id]

        if product.stock <= 0 or product.stock < line.quantity:
            logger.info(
                f"Stock check failed for product {product.id}: "
                f"available {product.stock}, requested {line.quantity}"
            )
            raise InsufficientStockError(
                product_id=product.id,
                available=product.stock,
                requested=line.quantity,
                name=product.name,
            )

    return products


def reserve(session: Session, product_id: int, quantity: int) -> None:
    """Atomic decrement-if-sufficient. Fails instead of going negative."""
    result = session.execute(
        update(Product)
        .where(Product.id == product_id)
        .where(Product.stock >= quantity)
        .values(stock=Product.stock - quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != 1:
        logger.warning(f"Reserve lost the race for product {product_id} (qty {quantity})")
        raise ConflictError(
            f"Stock for product {product_id} changed during checkout, please retry"
        )

    logger.debug(f"Reserved {quantity} of product {product_id}")
