from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from typing import Optional

from pos_api.models.users import UserRole
from pos_api.schemas.auth import LoginUser


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., min_length=8, max_length=72, description="Plain password (will be hashed). Minimum 8 characters.")
    name: Optional[str] = None
    role: UserRole = UserRole.CASHIER


class UserResponse(BaseModel):
    id: str
    email: EmailStr
    name: Optional[str]
    role: UserRole
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=8, max_length=72)
    name: Optional[str] = None
    role: Optional[UserRole] = None


class PasswordReset(BaseModel):
    new_password: str = Field(..., min_length=8, max_length=72)


class PasswordResetResponse(BaseModel):
    message: str
    user: LoginUser
