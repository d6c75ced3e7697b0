from decimal import Decimal
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from pos_api.schemas.pagination import Pagination


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Product name is required")
    description: Optional[str] = None
    sku: str = Field(..., min_length=1, description="SKU is required")
    barcode: Optional[str] = None

    price: Decimal = Field(
        ...,
        gt=0,
        lt=100_000_000,
        description="Price must be below 100 million"
    )

    cost: Decimal = Field(
        ...,
        gt=0,
        lt=100_000_000,
        description="Cost must be below 100 million"
    )

    stock: int = Field(0, ge=0, description="Stock cannot be negative")
    category_id: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    sku: Optional[str] = Field(None, min_length=1)
    barcode: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, lt=100_000_000)
    cost: Optional[Decimal] = Field(None, gt=0, lt=100_000_000)
    stock: Optional[int] = Field(None, ge=0)
    category_id: Optional[str] = None


class ProductCategory(BaseModel):
    id: str
    name: str

    model_config = ConfigDict(from_attributes=True)


class ProductResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    sku: str
    barcode: Optional[str]
    price: Decimal
    cost: Decimal
    stock: int
    category_id: Optional[str]
    category: Optional[ProductCategory] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProductListResponse(BaseModel):
    products: List[ProductResponse]
    pagination: Pagination
