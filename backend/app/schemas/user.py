from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.user import UserRole
from .common import PaginatedResponse


def _normalize_email(value: str) -> str:
    normalized = value.strip().lower()
    if "@" not in normalized:
        raise ValueError("email must contain '@'")
    return normalized


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=255)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    title: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    role: UserRole = UserRole.CLIENT_VIEWER
    can_pay: bool = False
    is_approver: bool = False

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        return _normalize_email(value)


class UserCreate(UserBase):
    """Schema used to invite a user into the caller's organization."""

    password: Optional[str] = Field(default=None, min_length=8)


class UserRead(UserBase):
    id: str
    organization_id: str
    is_active: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserListResponse(PaginatedResponse[UserRead]):
    pass


class UserUpdate(BaseModel):
    """Partial update of a user's profile, role and flags."""

    email: Optional[str] = Field(default=None, min_length=3, max_length=255)
    first_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    title: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    role: Optional[UserRole] = None
    can_pay: Optional[bool] = None
    is_approver: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        return _normalize_email(value)
