"""User schemas for request/response validation."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class UserRegister(BaseModel):
    """Schema for user registration request."""

    email: EmailStr
    password: str = Field(..., min_length=8)
    name: str = Field(..., min_length=1, max_length=150)
    cpf: str | None = Field(None, max_length=14)
    phone: str | None = Field(None, max_length=20)


class UserLogin(BaseModel):
    """Schema for user login request."""

    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    """Schema for admin updates of a customer record."""

    name: str | None = Field(None, min_length=1, max_length=150)
    cpf: str | None = Field(None, max_length=14)
    phone: str | None = Field(None, max_length=20)
    is_admin: bool | None = None
    status: str | None = Field(None, pattern="^(active|disabled)$")


class UserResponse(BaseModel):
    """Schema for user response."""

    user_id: UUID
    email: str
    name: str
    cpf: str | None = None
    phone: str | None = None
    is_admin: bool = False
    status: str = "active"
    created_at: datetime

    model_config = {"from_attributes": True}


class UserListResponse(BaseModel):
    users: list[UserResponse]
    total: int


class TokenResponse(BaseModel):
    """Schema for login token response."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = 3600
