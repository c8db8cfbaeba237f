import itertools
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, select

import storefront.models  # noqa: F401  (registers tables)
from storefront.config import settings
from storefront.database import build_engine, get_session
from storefront.main import app
from storefront.models import Product
from storefront.schemas.order_schemas import PlaceOrderRequest


_sku_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def no_notification_transports(monkeypatch):
    monkeypatch.setattr(settings, "BREVO_API_KEY", None)
    monkeypatch.setattr(settings, "MAIL_FROM", None)
    monkeypatch.setattr(settings, "TELEGRAM_BOT_TOKEN", None)
    monkeypatch.setattr(settings, "TELEGRAM_ADMIN_CHAT_ID", None)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


def _new_product(price, stock, name):
    n = next(_sku_counter)
    return Product(
        name=name or f"IP Camera {n}",
        slug=f"ip-camera-{n}",
        sku=f"CAM-{n:04d}",
        price=Decimal(price),
        stock=stock,
    )


@pytest.fixture
def make_product(session):
    """Create a product through the test's own session."""
    def _make(price="1000.00", stock=10, name=None):
        product = _new_product(price, stock, name)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def seed_product(engine):
    """Create a product in a short-lived session; returns a detached copy."""
    def _seed(price="1000.00", stock=10, name=None):
        with Session(engine, expire_on_commit=False) as s:
            product = _new_product(price, stock, name)
            s.add(product)
            s.commit()
        return product

    return _seed


@pytest.fixture
def read_stock(engine):
    def _read(product_id):
        with Session(engine) as s:
            return s.exec(select(Product.stock).where(Product.id == product_id)).one()

    return _read


@pytest.fixture
def make_request():
    def _make(items, delivery="courier", payment="cash", company=None, **extra):
        payload = {
            "contact": {
                "first_name": "Ivan",
                "last_name": "Petrov",
                "email": "ivan@example.com",
                "phone": "+79991234567",
            },
            "delivery": {"method": delivery, "city": "Moscow", "address": "Lenina 10"},
            "payment": {"method": payment, **(company or {})},
            "items": [
                {"product_id": product_id, "quantity": quantity}
                for product_id, quantity in items
            ],
        }
        payload.update(extra)
        return PlaceOrderRequest.model_validate(payload)

    return _make


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
