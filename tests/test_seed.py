from sqlmodel import select

from storefront.constants.order_status import can_transition
from storefront.models import Product
from storefront.seed import DEMO_PRODUCTS, seed_products


def test_seed_is_idempotent(session):
    assert seed_products(session) == len(DEMO_PRODUCTS)
    assert seed_products(session) == 0

    products = session.exec(select(Product)).all()
    assert len(products) == len(DEMO_PRODUCTS)
    assert {p.slug for p in products} >= {"ip-camera-4mp-dome", "nvr-16-channel"}


def test_status_transitions():
    assert can_transition("pending", "paid")
    assert can_transition("shipped", "completed")
    assert can_transition("shipped", "cancelled")
    assert not can_transition("cancelled", "pending")
    assert not can_transition("completed", "shipped")
