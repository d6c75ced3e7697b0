from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Category name is required")


class CategoryResponse(BaseModel):
    id: str
    name: str
    created_at: datetime
    product_count: int = 0

    model_config = ConfigDict(from_attributes=True)
