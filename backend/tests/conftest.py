"""
Pytest fixtures and configuration for Storefront Backend tests

Database-backed tests run against an in-memory SQLite engine; API tests
drive the FastAPI app through TestClient with the database and auth
dependencies pointed at these fixtures.
"""
import os

# Must be set before storefront.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"

from datetime import datetime, timedelta, timezone
from itertools import count

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.core.database import Base, get_db
from storefront.models.order import Address, Customer, Order, Region

TEST_AUTH_SECRET = "test-secret-do-not-use"


@pytest.fixture(autouse=True)
def auth_secret(monkeypatch):
    """Every test signs and verifies tokens with the same secret"""
    monkeypatch.setenv("AUTH_SECRET", TEST_AUTH_SECRET)
    return TEST_AUTH_SECRET


@pytest.fixture(scope="function")
def engine():
    """
    Fresh in-memory database per test

    StaticPool keeps the single connection alive across the threadpool
    workers TestClient runs sync endpoints on.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    session = sessionmaker(bind=engine, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def make_token():
    """Mint a customer session token"""
    def _make_token(customer_id="cus_alice", expires_in=timedelta(hours=1), **claims):
        now = datetime.now(timezone.utc)
        payload = {"iat": now, "exp": now + expires_in, **claims}
        if customer_id is not None:
            payload["customer_id"] = customer_id
        return jwt.encode(payload, TEST_AUTH_SECRET, algorithm="HS256")
    return _make_token


@pytest.fixture
def auth_headers(make_token):
    def _auth_headers(customer_id="cus_alice"):
        return {"Authorization": f"Bearer {make_token(customer_id)}"}
    return _auth_headers


@pytest.fixture
def client(db_session):
    """TestClient whose requests use the test session"""
    from storefront.main import app

    def _get_test_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_test_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def seed_reference_data(db_session):
    """Two customers, one region, one shipping address"""
    db_session.add_all([
        Customer(id="cus_alice", email="alice@example.com", first_name="Alice", last_name="Moreau"),
        Customer(id="cus_bob", email="bob@example.com", first_name="Bob", last_name="Ng"),
        Region(id="reg_eu", name="Europe", currency_code="eur", tax_rate=20.0),
        Address(id="addr_alice", first_name="Alice", last_name="Moreau",
                address_1="12 Rue des Lilas", city="Lyon", country_code="fr", postal_code="69001"),
    ])
    db_session.commit()


@pytest.fixture
def order_factory(db_session, seed_reference_data):
    """
    Create orders for tests

    Each call gets the next display_id and a creation time one day after
    the previous order, starting 2022-12-30.
    """
    sequence = count(1)

    def _make_order(**overrides):
        n = next(sequence)
        values = {
            "id": f"order_{n:03d}",
            "display_id": n,
            "cart_id": f"cart_{n:03d}",
            "status": "pending",
            "fulfillment_status": "not_fulfilled",
            "payment_status": "awaiting",
            "customer_id": "cus_alice",
            "region_id": "reg_eu",
            "shipping_address_id": "addr_alice",
            "email": "alice@example.com",
            "currency_code": "eur",
            "tax_rate": 20.0,
            "subtotal": 1000 * n,
            "shipping_total": 500,
            "discount_total": 0,
            "tax_total": 200 * n,
            "refunded_total": 0,
            "gift_card_total": 0,
            "total": 1200 * n + 500,
            "internal_notes": "flagged by fraud review",
            "created_at": datetime(2022, 12, 30) + timedelta(days=n - 1),
            "updated_at": datetime(2022, 12, 30) + timedelta(days=n - 1),
        }
        values.update(overrides)
        order = Order(**values)
        db_session.add(order)
        db_session.commit()
        return order

    return _make_order
