# =========================================================
# SALE TRANSACTION PROCESSOR
#
# CREATE:
# - Inserts the sale, its line items and the stock decrements
#   in one session transaction
# - Rejects the whole sale if any product would go below zero
#
# DELETE:
# - Restores stock from the line items, removes the line items,
#   then removes the sale, in one session transaction
#
# Non-admin callers only ever see or touch their own sales,
# and only sell their own products to their own customers
# =========================================================

import logging
from collections import OrderedDict
from datetime import date, datetime
from decimal import Decimal

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from pos_api.models.customers import Customer
from pos_api.models.products import Product
from pos_api.models.sale_items import SaleItem
from pos_api.models.sales import Sale
from pos_api.schemas.auth import Principal
from pos_api.schemas.pagination import paginate
from pos_api.schemas.sale import SaleCreate

logger = logging.getLogger("app")

CENTS = Decimal("0.01")


def calculate_total(sale_data: SaleCreate) -> Decimal:
    return (sale_data.subtotal - sale_data.discount).quantize(CENTS)


def _owned_sales(db: Session, principal: Principal):
    query = db.query(Sale).options(
        joinedload(Sale.items).joinedload(SaleItem.product),
        joinedload(Sale.customer),
    )

    if not principal.is_admin:
        query = query.filter(Sale.user_id == principal.user_id)

    return query


def _owned(query, model, principal: Principal):
    # Products and customers are private to the user who created them
    if principal.is_admin:
        return query
    return query.filter(model.user_id == principal.user_id)


def _get_owned_sale(db: Session, principal: Principal, sale_id: str) -> Sale:
    sale = _owned_sales(db, principal).filter(Sale.id == sale_id).first()

    if not sale:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Sale not found",
        )

    return sale


def _quantities_by_product(sale_data: SaleCreate):
    # The same product may appear on several lines of one cart
    quantities = OrderedDict()
    for item in sale_data.items:
        quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
    return quantities


# =========================================================
# CREATE SALE
# =========================================================
def create_sale(db: Session, principal: Principal, sale_data: SaleCreate) -> Sale:
    total = calculate_total(sale_data)

    try:
        if sale_data.customer_id:
            customer = (
                _owned(db.query(Customer), Customer, principal)
                .filter(Customer.id == sale_data.customer_id)
                .first()
            )
            if not customer:
                raise HTTPException(status_code=404, detail="Customer not found")

        sale = Sale(
            total=total,
            payment_type=sale_data.payment_type,
            discount=sale_data.discount,
            user_id=principal.user_id,
            customer_id=sale_data.customer_id or None,
        )
        db.add(sale)
        db.flush()

        db.add_all(
            SaleItem(
                sale_id=sale.id,
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
            )
            for item in sale_data.items
        )

        for product_id, quantity in _quantities_by_product(sale_data).items():
            product = (
                _owned(db.query(Product), Product, principal)
                .filter(Product.id == product_id)
                .with_for_update()
                .first()
            )

            if not product:
                raise HTTPException(status_code=404, detail=f"Product {product_id} not found")

            if product.stock < quantity:
                raise HTTPException(
                    status_code=400,
                    detail=f"Insufficient stock for {product.name}",
                )

            product.stock -= quantity

        db.commit()

    except HTTPException:
        db.rollback()
        raise

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Sale creation failed for user %s", principal.user_id)
        raise HTTPException(status_code=500, detail="Unable to complete sale")

    logger.info(
        "Sale %s created by %s: %d items, total %s",
        sale.id,
        principal.user_id,
        len(sale_data.items),
        total,
    )

    return _get_owned_sale(db, principal, sale.id)


# =========================================================
# DELETE SALE
# =========================================================
def delete_sale(db: Session, principal: Principal, sale_id: str) -> None:
    sale = _get_owned_sale(db, principal, sale_id)
    items = list(sale.items)

    try:
        # Quantities live on the line items, so restore before deleting them
        for item in items:
            item.product.stock += item.quantity

        for item in items:
            db.delete(item)
        db.flush()
        db.expire(sale, ["items"])

        db.delete(sale)
        db.commit()

    except SQLAlchemyError:
        db.rollback()
        logger.exception("Sale deletion failed for sale %s", sale_id)
        raise HTTPException(status_code=500, detail="Unable to delete sale")

    logger.info("Sale %s deleted by %s, %d items restocked", sale_id, principal.user_id, len(items))


# =========================================================
# READS
# =========================================================
def get_sale(db: Session, principal: Principal, sale_id: str) -> Sale:
    return _get_owned_sale(db, principal, sale_id)


def list_sales(
    db: Session,
    principal: Principal,
    page: int = 1,
    limit: int = 20,
    start_date: date | None = None,
    end_date: date | None = None,
):
    filters = []

    if start_date:
        filters.append(Sale.created_at >= datetime.combine(start_date, datetime.min.time()))

    if end_date:
        filters.append(Sale.created_at <= datetime.combine(end_date, datetime.max.time()))

    query = _owned_sales(db, principal).filter(*filters)

    total = query.count()

    sales = (
        query
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    return {
        "sales": sales,
        "pagination": paginate(page, limit, total),
    }
