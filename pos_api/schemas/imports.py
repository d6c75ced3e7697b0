# schemas/imports.py

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional

from pos_api.schemas.sale import MAX_AMOUNT


class ProductImportRow(BaseModel):
    name: str = Field(..., min_length=1)
    sku: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, description="Category name, created if missing")
    price: Decimal = Field(..., gt=0, lt=MAX_AMOUNT, decimal_places=2)
    cost: Decimal = Field(..., gt=0, lt=MAX_AMOUNT, decimal_places=2)
    stock: int = Field(0, ge=0)
    description: Optional[str] = None
    barcode: Optional[str] = None


class CategoryImportRow(BaseModel):
    name: str = Field(..., min_length=1)


class ImportSummary(BaseModel):
    total: int
    success: int
    errors: int


class ImportResponse(BaseModel):
    message: str = "Import completed"
    summary: ImportSummary
    errors: List[str] = []
