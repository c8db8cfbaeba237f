# storefront/services/order_service.py
"""
Order placement transaction and the order operations around it.

A placement moves through::

    received -> validating -> persisting -> reserving -> committed
                         \\-> rejected       (any step) -> rolled_back

Product rows are locked while validating; the stock decrement comes after the
order rows are flushed, so a lost race rolls everything back together.
Nothing is written unless the final commit succeeds. Notifications run only
after the commit and can never undo it.
"""
import logging
from collections import OrderedDict
from datetime import date
from enum import Enum
from typing import Callable, List, Optional, Tuple
from uuid import uuid4

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload
from sqlmodel import Session, select

from storefront.config import settings
from storefront.constants.order_status import can_transition
from storefront.exceptions import (
    ConflictError,
    InvalidStatusTransitionError,
    OrderNotFoundError,
    OrderNumberConflictError,
    PersistenceError,
    StorefrontError,
    ValidationError,
)
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.models.order_item import OrderItem
from storefront.models.user import User
from storefront.schemas.order_schemas import OrderRead
from storefront.services import inventory_service
from storefront.services.order_assembly import OrderLine, PricingConfig, assemble_order
from storefront.services.order_event_service import log_order_event
from storefront.services.order_number import next_order_number
from storefront.utils.dates import utcnow
from storefront.utils.pagination import paginate

logger = logging.getLogger(__name__)

ORDER_RELATIONS = (
    selectinload(Order.items).selectinload(OrderItem.product),
    selectinload(Order.user),
)


class PlacementState(str, Enum):
    RECEIVED = "received"
    VALIDATING = "validating"
    RESERVING = "reserving"
    PERSISTING = "persisting"
    COMMITTED = "committed"
    REJECTED = "rejected"
    ROLLED_BACK = "rolled_back"


def _state(reference: str, state: PlacementState):
    logger.info(f"Placement {reference}: {state.value}")


def validate_line_items(items) -> List[OrderLine]:
    """Reject malformed line items before any transaction is opened."""
    if not items:
        raise ValidationError("Order must contain at least one item")

    merged = OrderedDict()
    for item in items:
        if item.quantity < 1:
            raise ValidationError(
                f"Quantity for product {item.product_id} must be at least 1"
            )
        # one OrderItem per distinct product
        merged[item.product_id] = merged.get(item.product_id, 0) + item.quantity

    return [OrderLine(product_id=pid, quantity=qty) for pid, qty in merged.items()]


def _is_order_number_conflict(exc: IntegrityError) -> bool:
    return "order_number" in str(exc.orig).lower()


def _place_once(
    session: Session,
    request,
    lines: List[OrderLine],
    *,
    user: Optional[User],
    pricing: PricingConfig,
    prefix: str,
    today: Optional[date],
    reference: str,
) -> Tuple[int, str]:
    try:
        _state(reference, PlacementState.VALIDATING)
        products = inventory_service.validate_availability(session, lines)

        assembled = assemble_order(request, products, lines, pricing, user=user)
        order = assembled.order
        order.order_number = next_order_number(session, prefix=prefix, today=today)

        _state(reference, PlacementState.PERSISTING)
        session.add(order)
        session.flush()
        order_id, order_number = order.id, order.order_number

        _state(reference, PlacementState.RESERVING)
        for line in lines:
            inventory_service.reserve(session, line.product_id, line.quantity)

        log_order_event(
            session,
            order_id=order.id,
            event_type="order_placed",
            label=f"Order {order.order_number} placed",
            created_by=f"user:{user.id}" if user else "guest",
            meta={
                "total_amount": str(order.total_amount),
                "items": len(assembled.items),
            },
        )

        session.commit()

    except ConflictError:
        session.rollback()
        _state(reference, PlacementState.ROLLED_BACK)
        raise

    except StorefrontError:
        session.rollback()
        _state(reference, PlacementState.REJECTED)
        raise

    except IntegrityError as exc:
        session.rollback()
        _state(reference, PlacementState.ROLLED_BACK)
        if _is_order_number_conflict(exc):
            raise OrderNumberConflictError("Order number already taken, please retry") from exc
        logger.error(f"Integrity error while placing order: {exc.orig}")
        raise PersistenceError("Could not save the order") from exc

    except SQLAlchemyError as exc:
        session.rollback()
        _state(reference, PlacementState.ROLLED_BACK)
        logger.error(f"Database error while placing order: {exc}")
        raise PersistenceError("Could not save the order") from exc

    except Exception:
        session.rollback()
        _state(reference, PlacementState.ROLLED_BACK)
        raise

    _state(reference, PlacementState.COMMITTED)
    return order_id, order_number


def _notify(notifier: Optional[Callable], order: Order):
    if notifier is None:
        return

    try:
        notifier(OrderRead.model_validate(order))
    except Exception:
        # the order is committed; notification is best-effort
        logger.exception(f"Failed to notify about order {order.order_number}")


def place_order(
    session: Session,
    request,
    *,
    user: Optional[User] = None,
    pricing: Optional[PricingConfig] = None,
    notifier: Optional[Callable] = None,
    prefix: Optional[str] = None,
    max_attempts: Optional[int] = None,
    today: Optional[date] = None,
) -> Order:
    """
    Turn a placement request into a committed order.

    Raises ValidationError, NotFoundError, InsufficientStockError,
    ConflictError or PersistenceError. On any of them nothing was written.
    """
    pricing = pricing or PricingConfig.from_settings(settings)
    prefix = prefix or settings.ORDER_NUMBER_PREFIX
    max_attempts = max_attempts or settings.ORDER_NUMBER_MAX_ATTEMPTS

    reference = uuid4().hex[:8]
    _state(reference, PlacementState.RECEIVED)

    try:
        lines = validate_line_items(request.items)
    except ValidationError:
        _state(reference, PlacementState.REJECTED)
        raise

    attempt = 0
    while True:
        attempt += 1
        try:
            order_id, order_number = _place_once(
                session,
                request,
                lines,
                user=user,
                pricing=pricing,
                prefix=prefix,
                today=today,
                reference=reference,
            )
            break
        except OrderNumberConflictError:
            if attempt >= max_attempts:
                raise
            logger.warning(
                f"Order number collision for {reference}, retrying "
                f"({attempt}/{max_attempts})"
            )

    try:
        order = get_order(session, order_id)
    except SQLAlchemyError as exc:
        # committed already, only the read-back failed
        session.rollback()
        logger.error(f"Order {order_number} committed but read-back failed: {exc}")
        raise PersistenceError(
            f"Order {order_number} was placed but could not be loaded",
            order_number=order_number,
        ) from exc

    logger.info(f"Order {order.order_number} committed, total {order.total_amount} {order.currency}")

    _notify(notifier, order)
    return order


# ---------- READ BACK ----------

def get_order(session: Session, order_id: int) -> Order:
    order = session.exec(
        select(Order).where(Order.id == order_id).options(*ORDER_RELATIONS)
    ).first()

    if not order:
        raise OrderNotFoundError(order_id)
    return order


def get_order_by_number(session: Session, order_number: str) -> Order:
    order = session.exec(
        select(Order).where(Order.order_number == order_number).options(*ORDER_RELATIONS)
    ).first()

    if not order:
        raise OrderNotFoundError(order_number)
    return order


def list_orders(
    session: Session,
    *,
    page: int = 1,
    limit: int = 20,
    status: Optional[OrderStatus] = None,
    user_id: Optional[int] = None,
):
    query = select(Order).options(*ORDER_RELATIONS)

    if status:
        query = query.where(Order.status == status)

    if user_id:
        query = query.where(Order.user_id == user_id)

    query = query.order_by(Order.created_at.desc(), Order.id.desc())

    return paginate(session=session, query=query, page=page, limit=limit)


# ---------- ADMIN UPDATES ----------

def _commit(session: Session, what: str):
    try:
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error(f"Database error while {what}: {exc}")
        raise PersistenceError(f"Could not save {what}") from exc


def update_status(
    session: Session,
    order_id: int,
    status: OrderStatus,
    *,
    notifier: Optional[Callable] = None,
    changed_by: str = "admin",
) -> Order:
    order = get_order(session, order_id)
    current = order.status

    if not can_transition(current.value, status.value):
        raise InvalidStatusTransitionError(current.value, status.value)

    order.status = status
    session.add(order)
    log_order_event(
        session,
        order_id=order.id,
        event_type="status_changed",
        label=f"Status changed from {current.value} to {status.value}",
        created_by=changed_by,
        meta={"from": current.value, "to": status.value},
    )
    _commit(session, "order status")

    order = get_order(session, order_id)
    logger.info(f"Order {order.order_number} status: {current.value} -> {status.value}")

    _notify(notifier, order)
    return order


def update_payment_status(
    session: Session,
    order_id: int,
    payment_status: PaymentStatus,
    *,
    changed_by: str = "admin",
) -> Order:
    order = get_order(session, order_id)

    # JSON column: assign a new dict so the change is tracked
    meta = dict(order.meta or {})
    meta["payment_status"] = payment_status.value
    if payment_status == PaymentStatus.paid:
        meta["paid_at"] = utcnow().isoformat()
    order.meta = meta

    session.add(order)
    log_order_event(
        session,
        order_id=order.id,
        event_type="payment_status_changed",
        label=f"Payment status set to {payment_status.value}",
        created_by=changed_by,
        meta={"payment_status": payment_status.value},
    )
    _commit(session, "payment status")

    return get_order(session, order_id)
