import pytest
from sqlmodel import select

from storefront.exceptions import ConflictError, InsufficientStockError, NotFoundError
from storefront.models import Product
from storefront.services import inventory_service
from storefront.services.order_assembly import OrderLine


def stock(session, product_id):
    session.expire_all()
    return session.exec(select(Product.stock).where(Product.id == product_id)).one()


def test_load_products_skips_missing_ids(session, make_product):
    a = make_product()
    b = make_product()

    products = inventory_service.load_products_by_ids(session, [b.id, 999, a.id])

    assert [p.id for p in products] == sorted([a.id, b.id])


def test_validate_returns_products_by_id(session, make_product):
    a = make_product(stock=5)

    products = inventory_service.validate_availability(session, [OrderLine(a.id, 5)])

    assert products[a.id].id == a.id


def test_validate_reports_every_missing_id(session, make_product):
    a = make_product()

    with pytest.raises(NotFoundError) as exc_info:
        inventory_service.validate_availability(
            session, [OrderLine(a.id, 1), OrderLine(999, 1), OrderLine(998, 2)]
        )

    assert exc_info.value.missing_ids == [999, 998]


def test_validate_distinguishes_out_of_stock(session, make_product):
    a = make_product(stock=0, name="PoE Switch")

    with pytest.raises(InsufficientStockError) as exc_info:
        inventory_service.validate_availability(session, [OrderLine(a.id, 1)])

    err = exc_info.value
    assert err.out_of_stock
    assert err.available == 0
    assert "out of stock" in err.message


def test_validate_reports_available_and_requested(session, make_product):
    a = make_product(stock=1)

    with pytest.raises(InsufficientStockError) as exc_info:
        inventory_service.validate_availability(session, [OrderLine(a.id, 5)])

    err = exc_info.value
    assert not err.out_of_stock
    assert (err.product_id, err.available, err.requested) == (a.id, 1, 5)


def test_reserve_decrements(session, make_product):
    a = make_product(stock=10)

    inventory_service.reserve(session, a.id, 4)
    session.commit()

    assert stock(session, a.id) == 6


def test_reserve_refuses_to_go_negative(session, make_product):
    a = make_product(stock=2)

    with pytest.raises(ConflictError):
        inventory_service.reserve(session, a.id, 3)
    session.rollback()

    assert stock(session, a.id) == 2


def test_reserve_can_empty_the_shelf(session, make_product):
    a = make_product(stock=3)

    inventory_service.reserve(session, a.id, 3)
    session.commit()

    assert stock(session, a.id) == 0
