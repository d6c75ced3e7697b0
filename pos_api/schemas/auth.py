# schemas/auth.py

from pydantic import BaseModel, EmailStr, Field, ConfigDict

from pos_api.models.users import UserRole


class Principal(BaseModel):
    """Identity of the caller, resolved once per request."""

    user_id: str
    email: EmailStr
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)


class LoginUser(BaseModel):
    id: str
    email: EmailStr
    role: UserRole

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    message: str
    access_token: str
    token_type: str = "bearer"
    user: LoginUser
