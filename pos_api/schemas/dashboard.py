from pydantic import BaseModel, ConfigDict
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pos_api.models.sales import PaymentType


class LowStockProduct(BaseModel):
    id: str
    name: str
    sku: str
    stock: int

    model_config = ConfigDict(from_attributes=True)


class RecentSale(BaseModel):
    id: str
    total: Decimal
    payment_type: PaymentType
    customer_name: Optional[str]
    created_at: datetime


class DashboardResponse(BaseModel):
    today_revenue: Decimal
    today_sales: int
    total_revenue: Decimal
    total_sales: int
    total_products: int
    total_customers: int
    total_categories: int
    low_stock_threshold: int
    low_stock_products: List[LowStockProduct]
    recent_sales: List[RecentSale]
