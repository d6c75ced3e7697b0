from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from typing import List, Optional

from pos_api.schemas.pagination import Pagination


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, description="Customer name is required")
    phone: str = Field(..., min_length=1, description="Phone number is required")
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None


class CustomerUpdate(CustomerCreate):
    pass


class CustomerResponse(BaseModel):
    id: str
    name: str
    phone: str
    email: Optional[str]
    address: Optional[str]
    city: Optional[str]
    state: Optional[str]
    zip_code: Optional[str]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerListResponse(BaseModel):
    customers: List[CustomerResponse]
    pagination: Pagination
