from datetime import date
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from storefront.models.order import Order

SEQUENCE_WIDTH = 4


def format_order_number(prefix: str, day: date, sequence: int) -> str:
    # wider than 4 digits once a day passes 9999, never wraps
    return f"{prefix}-{day:%Y%m%d}-{sequence:0{SEQUENCE_WIDTH}d}"


def parse_order_sequence(order_number: str) -> int:
    return int(order_number.rsplit("-", 1)[1])


def next_order_number(session: Session, *, prefix: str = "ORD", today: Optional[date] = None) -> str:
    """
    Next day-scoped number, read inside the caller's transaction.

    Two placements can still read the same maximum; the unique constraint on
    order_number turns that into an OrderNumberConflictError for the caller.
    """
    today = today or date.today()
    like = f"{prefix}-{today:%Y%m%d}-%"

    last_number = session.exec(
        select(Order.order_number)
        .where(Order.order_number.like(like))
        .order_by(func.length(Order.order_number).desc(), Order.order_number.desc())
        .limit(1)
    ).first()

    sequence = parse_order_sequence(last_number) + 1 if last_number else 1
    return format_order_number(prefix, today, sequence)
