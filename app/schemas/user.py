# app/schemas/user.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination

# App-level roles. Guests have no token, so we don't store them.
Role = Literal["customer", "admin"]


class UserRead(SQLModel):
    """Profile returned to its owner (and to admins)."""

    id: uuid.UUID
    name: str
    email: EmailStr
    role: Role
    phone: str | None = None
    address: str | None = None
    city: str | None = None
    postal_code: str | None = None
    is_admin: bool
    created_at: datetime
    updated_at: datetime


class UserPage(SQLModel):
    users: list[UserRead]
    pagination: Pagination


class ProfileUpdate(SQLModel):
    """
    Partial profile update for authenticated users.

    Email and role are owned by the identity provider / admins and
    cannot be changed here.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class ApiStatus(SQLModel):
    service: str
    status: str
    authenticated_user: EmailStr
    features: list[str]
