"""
Pytest configuration for the POS API tests.

Settings are read from the environment when pos_api is first imported,
so the test values are exported here before anything imports it.
"""

import os

os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from pos_api.main import app
from pos_api.database import Base, SessionLocal, engine
from pos_api.core.hashing import hash_password
from pos_api.core.jwt import create_access_token
from pos_api.models import Customer, Product, User, UserRole
from pos_api.schemas.auth import Principal

PASSWORD = "correct-horse-battery"


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def make_user(db):
    def _make_user(email, role=UserRole.CASHIER):
        user = User(email=email, role=role, password_hash=hash_password(PASSWORD))
        db.add(user)
        db.commit()
        return user

    return _make_user


@pytest.fixture
def cashier(make_user):
    return make_user("cashier@shop.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@shop.com", UserRole.ADMIN)


def principal_for(user) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role)


def client_for(user) -> TestClient:
    token = create_access_token(user.id, user.email, user.role.value)
    client = TestClient(app)
    client.headers["Authorization"] = f"Bearer {token}"
    return client


@pytest.fixture
def client(db):
    return TestClient(app)


@pytest.fixture
def cashier_client(cashier):
    return client_for(cashier)


@pytest.fixture
def admin_client(admin):
    return client_for(admin)


@pytest.fixture
def make_product(db, cashier):
    counter = {"n": 0}

    def _make_product(name="Widget", price="100.00", stock=10, owner=None):
        counter["n"] += 1
        product = Product(
            name=name,
            sku=f"SKU-{counter['n']:03d}",
            price=Decimal(price),
            cost=Decimal("1.00"),
            stock=stock,
            user_id=(owner or cashier).id,
        )
        db.add(product)
        db.commit()
        return product

    return _make_product


@pytest.fixture
def make_customer(db, cashier):
    def _make_customer(name="Ada", phone="555-0101", owner=None):
        customer = Customer(name=name, phone=phone, user_id=(owner or cashier).id)
        db.add(customer)
        db.commit()
        return customer

    return _make_customer


def stock_of(db, product) -> int:
    db.expire_all()
    return db.get(Product, product.id).stock
