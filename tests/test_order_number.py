from datetime import date

from storefront.models import Order
from storefront.services.order_number import (
    format_order_number,
    next_order_number,
    parse_order_sequence,
)

DAY = date(2026, 10, 19)


def add_orders(session, *numbers):
    for number in numbers:
        session.add(Order(order_number=number))
    session.commit()


def test_format_is_zero_padded():
    assert format_order_number("ORD", DAY, 1) == "ORD-20261019-0001"
    assert format_order_number("ORD", DAY, 42) == "ORD-20261019-0042"


def test_format_widens_instead_of_wrapping():
    assert format_order_number("ORD", DAY, 10000) == "ORD-20261019-10000"


def test_parse_sequence():
    assert parse_order_sequence("ORD-20261019-0042") == 42


def test_first_number_of_the_day(session):
    assert next_order_number(session, prefix="ORD", today=DAY) == "ORD-20261019-0001"


def test_increments_from_latest_of_the_day(session):
    add_orders(session, "ORD-20261019-0001", "ORD-20261019-0007", "ORD-20261019-0003")

    assert next_order_number(session, prefix="ORD", today=DAY) == "ORD-20261019-0008"


def test_new_day_restarts_sequence(session):
    add_orders(session, "ORD-20261018-0015")

    assert next_order_number(session, prefix="ORD", today=DAY) == "ORD-20261019-0001"


def test_other_prefixes_are_ignored(session):
    add_orders(session, "TST-20261019-0005")

    assert next_order_number(session, prefix="ORD", today=DAY) == "ORD-20261019-0001"


def test_widened_numbers_sort_after_four_digits(session):
    add_orders(session, "ORD-20261019-9999", "ORD-20261019-10000")

    assert next_order_number(session, prefix="ORD", today=DAY) == "ORD-20261019-10001"
