"""Populate an empty database with an admin account and a demo catalog.

Usage: python -m pos_api.seed
"""

import logging
from decimal import Decimal

import pos_api.models  # noqa: F401
from pos_api.database import Base, SessionLocal, engine
from pos_api.core.hashing import hash_password
from pos_api.models import Category, Customer, Product, User, UserRole

logger = logging.getLogger("app")

ADMIN_EMAIL = "admin@shop.com"
ADMIN_PASSWORD = "ShopAdmin#2026"

CATEGORIES = ["Electronics", "Clothing", "Home & Garden", "Sports"]

PRODUCTS = [
    # name, sku, category, price, cost, stock
    ("Wireless Earbuds", "ELEC-001", "Electronics", "59.99", "32.00", 25),
    ("Phone Charger", "ELEC-002", "Electronics", "14.99", "6.50", 60),
    ("Cotton T-Shirt", "CLTH-001", "Clothing", "12.00", "4.75", 80),
    ("Rain Jacket", "CLTH-002", "Clothing", "45.00", "21.00", 8),
    ("Garden Hose", "HOME-001", "Home & Garden", "24.50", "11.00", 15),
    ("Yoga Mat", "SPRT-001", "Sports", "19.99", "8.00", 5),
]


def seed(db) -> User:
    if db.query(User).filter(User.email == ADMIN_EMAIL).first():
        raise RuntimeError(f"Database already seeded ({ADMIN_EMAIL} exists)")

    admin = User(
        email=ADMIN_EMAIL,
        name="Administrator",
        role=UserRole.ADMIN,
        password_hash=hash_password(ADMIN_PASSWORD),
    )
    db.add(admin)
    db.flush()

    categories = {}
    for name in CATEGORIES:
        categories[name] = Category(name=name, user_id=admin.id)
        db.add(categories[name])
    db.flush()

    for name, sku, category, price, cost, stock in PRODUCTS:
        db.add(
            Product(
                name=name,
                sku=sku,
                price=Decimal(price),
                cost=Decimal(cost),
                stock=stock,
                category_id=categories[category].id,
                user_id=admin.id,
            )
        )

    db.add(Customer(name="Walk-in Regular", phone="555-0100", user_id=admin.id))

    db.commit()

    logger.info(
        "Seeded admin %s, %d categories, %d products",
        ADMIN_EMAIL,
        len(CATEGORIES),
        len(PRODUCTS),
    )

    return admin


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    Base.metadata.create_all(bind=engine)

    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()
