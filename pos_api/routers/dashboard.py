# pos_api/routers/dashboard.py

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from pos_api.database import get_db
from pos_api.core.auth import get_current_user
from pos_api.core.config import settings
from pos_api.models.categories import Category
from pos_api.models.customers import Customer
from pos_api.models.products import Product
from pos_api.models.sales import Sale
from pos_api.schemas.auth import Principal
from pos_api.schemas.dashboard import DashboardResponse

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


def _scoped(query, model, principal: Principal):
    if principal.is_admin:
        return query
    return query.filter(model.user_id == principal.user_id)


@router.get("", response_model=DashboardResponse)
def dashboard(
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    tomorrow_start = today_start + timedelta(days=1)

    today_revenue, today_sales = _scoped(
        db.query(
            func.coalesce(func.sum(Sale.total), 0),
            func.count(Sale.id),
        ),
        Sale,
        current_user,
    ).filter(
        Sale.created_at >= today_start,
        Sale.created_at < tomorrow_start,
    ).one()

    total_revenue, total_sales = _scoped(
        db.query(
            func.coalesce(func.sum(Sale.total), 0),
            func.count(Sale.id),
        ),
        Sale,
        current_user,
    ).one()

    total_products = _scoped(db.query(func.count(Product.id)), Product, current_user).scalar()
    total_customers = _scoped(db.query(func.count(Customer.id)), Customer, current_user).scalar()
    total_categories = _scoped(db.query(func.count(Category.id)), Category, current_user).scalar()

    low_stock_products = (
        _scoped(db.query(Product), Product, current_user)
        .filter(Product.stock <= settings.LOW_STOCK_THRESHOLD)
        .order_by(Product.stock.asc(), Product.name)
        .all()
    )

    recent_sales = (
        _scoped(db.query(Sale), Sale, current_user)
        .options(joinedload(Sale.customer))
        .order_by(Sale.created_at.desc(), Sale.id.desc())
        .limit(5)
        .all()
    )

    return {
        "today_revenue": Decimal(today_revenue or 0),
        "today_sales": today_sales,
        "total_revenue": Decimal(total_revenue or 0),
        "total_sales": total_sales,
        "total_products": total_products,
        "total_customers": total_customers,
        "total_categories": total_categories,
        "low_stock_threshold": settings.LOW_STOCK_THRESHOLD,
        "low_stock_products": low_stock_products,
        "recent_sales": [
            {
                "id": sale.id,
                "total": sale.total,
                "payment_type": sale.payment_type,
                "customer_name": sale.customer.name if sale.customer else None,
                "created_at": sale.created_at,
            }
            for sale in recent_sales
        ],
    }
