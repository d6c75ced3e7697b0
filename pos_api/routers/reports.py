# =========================================================
# REPORTS ROUTER
#
# period=today  -> since midnight (UTC)
# period=week   -> last 7 days
# period=month  -> last 30 days
#
# Non-admin users only see their own sales.
# Schema-safe: money is always Decimal (never None)
# =========================================================

from collections import defaultdict
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlalchemy.orm import Session

from pos_api.database import get_db
from pos_api.core.auth import get_current_user
from pos_api.models.products import Product
from pos_api.models.sale_items import SaleItem
from pos_api.models.sales import PaymentType, Sale
from pos_api.schemas.auth import Principal
from pos_api.schemas.report import ReportPeriod, SalesReportResponse

router = APIRouter(prefix="/reports", tags=["Reports"])

PERIOD_DAYS = {
    "today": 0,
    "week": 7,
    "month": 30,
}

PAYMENT_LABELS = {
    PaymentType.CASH: "Cash",
    PaymentType.CARD: "Card",
    PaymentType.MOBILE_PAY: "Mobile Pay",
}

TOP_PRODUCTS_LIMIT = 5


def _period_start(period: str, now: datetime) -> datetime:
    start = now - timedelta(days=PERIOD_DAYS[period])
    return start.replace(hour=0, minute=0, second=0, microsecond=0)


# =========================================================
# CORE REPORT CALCULATION
# =========================================================
def _calculate_sales_report(
    db: Session,
    principal: Principal,
    start_dt: datetime,
    end_dt: datetime,
):
    base_filter = [Sale.created_at.between(start_dt, end_dt)]

    if not principal.is_admin:
        base_filter.append(Sale.user_id == principal.user_id)

    sales = (
        db.query(Sale.created_at, Sale.total, Sale.payment_type)
        .filter(*base_filter)
        .order_by(Sale.created_at.asc())
        .all()
    )

    by_date = defaultdict(lambda: {"total": Decimal("0"), "count": 0})
    by_payment = defaultdict(lambda: {"amount": Decimal("0"), "count": 0})

    for created_at, total, payment_type in sales:
        total = Decimal(total or 0)

        day = by_date[created_at.date().isoformat()]
        day["total"] += total
        day["count"] += 1

        method = by_payment[payment_type]
        method["amount"] += total
        method["count"] += 1

    top_products = (
        db.query(
            Product.name.label("name"),
            func.coalesce(func.sum(SaleItem.quantity), 0).label("quantity"),
            func.coalesce(func.sum(SaleItem.price * SaleItem.quantity), 0).label("revenue"),
        )
        .join(SaleItem, SaleItem.product_id == Product.id)
        .join(Sale, SaleItem.sale_id == Sale.id)
        .filter(*base_filter)
        .group_by(Product.id, Product.name)
        .order_by(func.sum(SaleItem.price * SaleItem.quantity).desc())
        .limit(TOP_PRODUCTS_LIMIT)
        .all()
    )

    total_revenue = sum((day["total"] for day in by_date.values()), Decimal("0"))
    total_sales = len(sales)

    #  AVERAGE ORDER VALUE
    if total_sales == 0:
        average_order_value = Decimal("0.00")
    else:
        average_order_value = (total_revenue / total_sales).quantize(Decimal("0.01"))

    return {
        "sales_data": [
            {"date": day, "total": data["total"], "count": data["count"]}
            for day, data in sorted(by_date.items())
        ],
        "top_products": [
            {
                "name": row.name,
                "quantity": row.quantity,
                "revenue": Decimal(row.revenue or 0),
            }
            for row in top_products
        ],
        "payment_breakdown": [
            {
                "method": PAYMENT_LABELS[method],
                "amount": data["amount"],
                "count": data["count"],
            }
            for method, data in by_payment.items()
        ],
        "summary": {
            "total_revenue": total_revenue,
            "total_sales": total_sales,
            "average_order_value": average_order_value,
        },
    }


# =========================================================
# SALES REPORT
# =========================================================
@router.get("/sales", response_model=SalesReportResponse)
def sales_report(
    period: ReportPeriod = Query("today"),
    db: Session = Depends(get_db),
    current_user: Principal = Depends(get_current_user),
):
    # Stored timestamps are naive UTC on SQLite
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    report = _calculate_sales_report(
        db,
        current_user,
        _period_start(period, now),
        now,
    )

    return {"period": period, **report}
