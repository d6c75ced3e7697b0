"""
Tests for `pos_api/services/sale_processor.py`.

Covers the transaction rules:
- total = sum(price * quantity) - discount, exact to the cent
- stock is decremented on create and restored on delete
- a failure anywhere in the transaction leaves nothing behind
- sales are only visible to their owner (or an admin)
"""

from decimal import Decimal

import pytest
from fastapi import HTTPException
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from conftest import principal_for, stock_of
from pos_api.database import engine
from pos_api.models import PaymentType, Sale, SaleItem
from pos_api.schemas.sale import SaleCreate
from pos_api.services import sale_processor


def _cart(*lines, discount="0", **extra):
    return SaleCreate(
        items=[
            {"product_id": product.id, "quantity": quantity, "price": price}
            for product, quantity, price in lines
        ],
        discount=discount,
        **extra,
    )


@pytest.fixture
def fail_on_stock_update():
    """Make every UPDATE of the products table blow up at the driver level."""

    def _raise(conn, cursor, statement, parameters, context, executemany):
        if statement.startswith("UPDATE products"):
            raise OperationalError(statement, parameters, Exception("forced stock update failure"))

    event.listen(engine, "before_cursor_execute", _raise)
    yield
    event.remove(engine, "before_cursor_execute", _raise)


def test_create_sale_scenario_total_and_stock(db, cashier, make_product) -> None:
    """Verify the A(2 x 100) + B(1 x 50) - 20 scenario."""

    product_a = make_product("A", stock=10)
    product_b = make_product("B", price="50.00", stock=5)

    sale = sale_processor.create_sale(
        db,
        principal_for(cashier),
        _cart((product_a, 2, "100"), (product_b, 1, "50"), discount="20"),
    )

    assert sale.total == Decimal("230")
    assert sale.discount == Decimal("20")
    assert sale.payment_type == PaymentType.CASH
    assert sale.user_id == cashier.id
    assert len(sale.items) == 2
    assert stock_of(db, product_a) == 8
    assert stock_of(db, product_b) == 4


def test_total_is_exact_to_the_cent(db, cashier, make_product) -> None:
    """Verify Decimal arithmetic avoids float drift."""

    product = make_product(stock=100)

    sale = sale_processor.create_sale(
        db,
        principal_for(cashier),
        _cart((product, 3, "0.10"), (product, 7, "19.99"), discount="0.01"),
    )

    # 0.30 + 139.93 - 0.01
    assert sale.total == Decimal("140.22")
    assert stock_of(db, product) == 90


def test_line_items_capture_price_at_time_of_sale(db, cashier, make_product) -> None:
    """Verify later catalog price changes do not rewrite sale history."""

    product = make_product(price="100.00")
    sale = sale_processor.create_sale(db, principal_for(cashier), _cart((product, 1, "95.00")))

    product.price = Decimal("150.00")
    db.commit()
    db.expire_all()

    item = db.query(SaleItem).filter(SaleItem.sale_id == sale.id).one()
    assert item.price == Decimal("95.00")


def test_insufficient_stock_rejects_whole_sale(db, cashier, make_product) -> None:
    """Verify the guarded decrement rejects the sale and changes nothing."""

    plenty = make_product("Plenty", stock=10)
    scarce = make_product("Scarce", stock=1)

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(
            db,
            principal_for(cashier),
            _cart((plenty, 3, "10"), (scarce, 2, "10")),
        )

    assert exc_info.value.status_code == 400
    assert "Scarce" in exc_info.value.detail
    assert db.query(Sale).count() == 0
    assert stock_of(db, plenty) == 10
    assert stock_of(db, scarce) == 1


def test_repeated_product_lines_are_summed_for_stock_check(db, cashier, make_product) -> None:
    """Verify two lines of 2 against a stock of 3 are rejected."""

    product = make_product(stock=3)

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(
            db,
            principal_for(cashier),
            _cart((product, 2, "10"), (product, 2, "10")),
        )

    assert exc_info.value.status_code == 400
    assert stock_of(db, product) == 3


def test_unknown_product_is_not_found(db, cashier, make_product) -> None:
    """Verify a missing product rolls back the already-flushed sale row."""

    product = make_product(stock=5)
    cart = SaleCreate(
        items=[
            {"product_id": product.id, "quantity": 1, "price": "10"},
            {"product_id": "does-not-exist", "quantity": 1, "price": "10"},
        ]
    )

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(db, principal_for(cashier), cart)

    assert exc_info.value.status_code == 404
    assert db.query(Sale).count() == 0
    assert stock_of(db, product) == 5


def test_unknown_customer_is_not_found(db, cashier, make_product) -> None:
    product = make_product()

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(
            db,
            principal_for(cashier),
            _cart((product, 1, "10"), customer_id="nobody"),
        )

    assert exc_info.value.status_code == 404
    assert db.query(Sale).count() == 0


def test_failed_stock_update_leaves_no_sale(db, cashier, make_product, fail_on_stock_update) -> None:
    """Verify atomicity: a driver failure on the stock update undoes everything."""

    product = make_product(stock=10)

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(db, principal_for(cashier), _cart((product, 4, "25")))

    assert exc_info.value.status_code == 500
    assert exc_info.value.detail == "Unable to complete sale"

    db.expire_all()
    assert db.query(Sale).count() == 0
    assert db.query(SaleItem).count() == 0
    assert stock_of(db, product) == 10


def test_delete_restores_stock_and_removes_items(db, cashier, make_product) -> None:
    product_a = make_product("A", stock=10)
    product_b = make_product("B", price="50.00", stock=5)
    principal = principal_for(cashier)

    sale = sale_processor.create_sale(
        db,
        principal,
        _cart((product_a, 2, "100"), (product_b, 1, "50"), discount="20"),
    )
    sale_id = sale.id

    sale_processor.delete_sale(db, principal, sale_id)

    db.expire_all()
    assert db.get(Sale, sale_id) is None
    assert db.query(SaleItem).filter(SaleItem.sale_id == sale_id).count() == 0
    assert stock_of(db, product_a) == 10
    assert stock_of(db, product_b) == 5


def test_second_delete_is_not_found_and_keeps_stock(db, cashier, make_product) -> None:
    product = make_product(stock=10)
    principal = principal_for(cashier)

    sale = sale_processor.create_sale(db, principal, _cart((product, 3, "10")))
    sale_id = sale.id
    sale_processor.delete_sale(db, principal, sale_id)

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.delete_sale(db, principal, sale_id)

    assert exc_info.value.status_code == 404
    assert stock_of(db, product) == 10


def test_failed_delete_keeps_sale_and_stock(db, cashier, make_product, request) -> None:
    """Verify a failure while restocking leaves the sale intact."""

    product = make_product(stock=10)
    principal = principal_for(cashier)
    sale = sale_processor.create_sale(db, principal, _cart((product, 3, "10")))
    sale_id = sale.id

    request.getfixturevalue("fail_on_stock_update")

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.delete_sale(db, principal, sale_id)

    assert exc_info.value.status_code == 500

    db.expire_all()
    assert db.get(Sale, sale_id) is not None
    assert db.query(SaleItem).filter(SaleItem.sale_id == sale_id).count() == 1
    assert stock_of(db, product) == 7


def test_other_users_cannot_see_or_delete_sale(db, cashier, admin, make_user, make_product) -> None:
    product = make_product(stock=10)
    sale = sale_processor.create_sale(db, principal_for(cashier), _cart((product, 1, "10")))

    other = principal_for(make_user("other@shop.com"))

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.get_sale(db, other, sale.id)
    assert exc_info.value.status_code == 404

    with pytest.raises(HTTPException):
        sale_processor.delete_sale(db, other, sale.id)
    assert stock_of(db, product) == 9

    # Admins can reach every sale
    assert sale_processor.get_sale(db, principal_for(admin), sale.id).id == sale.id


def test_list_sales_paginates_newest_first(db, cashier, make_user, make_product) -> None:
    product = make_product(stock=100)
    principal = principal_for(cashier)

    created = []
    for day in range(1, 6):
        sale = sale_processor.create_sale(db, principal, _cart((product, 1, "10")))
        sale.created_at = sale.created_at.replace(day=day, month=1, year=2026)
        created.append(sale.id)
    db.commit()

    # Someone else's sale must not show up
    sale_processor.create_sale(db, principal_for(make_user("other@shop.com")), _cart((product, 1, "10")))

    first_page = sale_processor.list_sales(db, principal, page=1, limit=2)
    assert first_page["pagination"] == {"page": 1, "limit": 2, "total": 5, "pages": 3}
    assert [s.id for s in first_page["sales"]] == [created[4], created[3]]

    last_page = sale_processor.list_sales(db, principal, page=3, limit=2)
    assert [s.id for s in last_page["sales"]] == [created[0]]


def test_list_sales_date_range_is_inclusive(db, cashier, make_product) -> None:
    from datetime import date

    product = make_product(stock=100)
    principal = principal_for(cashier)

    ids = {}
    for day in (1, 2, 3):
        sale = sale_processor.create_sale(db, principal, _cart((product, 1, "10")))
        sale.created_at = sale.created_at.replace(year=2026, month=3, day=day, hour=23)
        ids[day] = sale.id
    db.commit()

    result = sale_processor.list_sales(
        db,
        principal,
        start_date=date(2026, 3, 2),
        end_date=date(2026, 3, 3),
    )

    assert result["pagination"]["total"] == 2
    assert {s.id for s in result["sales"]} == {ids[2], ids[3]}


def test_cannot_sell_another_users_product_or_customer(db, cashier, admin, make_user, make_product, make_customer) -> None:
    """Verify products and customers owned by someone else are invisible to the sale."""

    other = make_user("other@shop.com")
    foreign_product = make_product("Secret Stock", stock=5, owner=other)
    foreign_customer = make_customer("Eve", phone="555-0666", owner=other)
    own_product = make_product(stock=5)

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(db, principal_for(cashier), _cart((foreign_product, 2, "10")))

    assert exc_info.value.status_code == 404
    assert "Secret Stock" not in exc_info.value.detail
    assert stock_of(db, foreign_product) == 5

    with pytest.raises(HTTPException) as exc_info:
        sale_processor.create_sale(
            db,
            principal_for(cashier),
            _cart((own_product, 1, "10"), customer_id=foreign_customer.id),
        )

    assert exc_info.value.status_code == 404
    assert db.query(Sale).count() == 0
    assert stock_of(db, own_product) == 5

    # Admins may sell from any catalog
    sale = sale_processor.create_sale(
        db,
        principal_for(admin),
        _cart((foreign_product, 2, "10"), customer_id=foreign_customer.id),
    )
    assert sale.customer_id == foreign_customer.id
    assert stock_of(db, foreign_product) == 3
