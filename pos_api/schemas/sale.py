# schemas/sale.py

from pydantic import BaseModel, Field, ValidationInfo, field_validator, ConfigDict
from datetime import datetime
from typing import List, Optional
from decimal import Decimal

from pos_api.models.sales import PaymentType
from pos_api.schemas.pagination import Pagination

MAX_AMOUNT = Decimal("100000000")


def calculate_subtotal(items) -> Decimal:
    return sum((item.price * item.quantity for item in items), Decimal("0"))


class SaleItemCreate(BaseModel):
    product_id: str = Field(..., min_length=1, description="Product is required")
    quantity: int = Field(..., gt=0, description="Quantity must be positive")
    price: Decimal = Field(
        ...,
        gt=0,
        lt=MAX_AMOUNT,
        decimal_places=2,
        description="Unit price captured at the time of sale",
    )


class SaleCreate(BaseModel):
    customer_id: Optional[str] = None
    items: List[SaleItemCreate] = Field(..., min_length=1, description="At least one item is required")
    payment_type: PaymentType = PaymentType.CASH
    discount: Decimal = Field(Decimal("0"), ge=0, lt=MAX_AMOUNT, decimal_places=2)

    @property
    def subtotal(self) -> Decimal:
        return calculate_subtotal(self.items)

    @field_validator("discount")
    @classmethod
    def discount_within_subtotal(cls, discount: Decimal, info: ValidationInfo):
        # items is missing from info.data when it failed its own validation
        items = info.data.get("items")
        if items and discount > calculate_subtotal(items):
            raise ValueError("Discount cannot exceed the sale subtotal")
        return discount


class SaleProductSummary(BaseModel):
    id: str
    name: str
    sku: str

    model_config = ConfigDict(from_attributes=True)


class SaleCustomerSummary(BaseModel):
    id: str
    name: str
    phone: str

    model_config = ConfigDict(from_attributes=True)


class SaleItemResponse(BaseModel):
    id: str
    product_id: str
    quantity: int
    price: Decimal
    product: Optional[SaleProductSummary] = None

    model_config = ConfigDict(from_attributes=True)


class SaleResponse(BaseModel):
    id: str
    total: Decimal
    discount: Decimal
    payment_type: PaymentType
    user_id: str
    customer_id: Optional[str]
    created_at: datetime
    customer: Optional[SaleCustomerSummary] = None
    items: List[SaleItemResponse]

    model_config = ConfigDict(from_attributes=True)


class SaleListResponse(BaseModel):
    sales: List[SaleResponse]
    pagination: Pagination


class MessageResponse(BaseModel):
    message: str
