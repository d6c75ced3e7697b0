# schemas/report.py

from pydantic import BaseModel
from decimal import Decimal
from typing import List, Literal

ReportPeriod = Literal["today", "week", "month"]


class DailySales(BaseModel):
    date: str
    total: Decimal
    count: int


class TopProduct(BaseModel):
    name: str
    quantity: int
    revenue: Decimal


class PaymentBreakdown(BaseModel):
    method: str
    amount: Decimal
    count: int


class ReportSummary(BaseModel):
    total_revenue: Decimal
    total_sales: int
    average_order_value: Decimal


class SalesReportResponse(BaseModel):
    period: ReportPeriod
    sales_data: List[DailySales]
    top_products: List[TopProduct]
    payment_breakdown: List[PaymentBreakdown]
    summary: ReportSummary
