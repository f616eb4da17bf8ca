# app/models/user.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class User(SQLModel, table=True):
    """
    Persistent user profile for the storefront.

    Identity:
      - id: MUST match the identity provider's user id (UUID from JWT "sub")

    Role:
      - "customer" | "admin"
      - guests are represented by the absence of a token.

    This table is *not* responsible for password hashes. The identity
    provider issues tokens; we only mirror identity, contact details
    and application role.
    """

    __tablename__ = "users"

    id: uuid.UUID = Field(
        primary_key=True,
        index=True,
        description="Matches the identity provider's user id",
    )

    email: str = Field(
        unique=True,
        index=True,
        description="Email from the access token",
    )

    name: str = Field(
        max_length=255,
        description="Customer display name; first part of email by default",
    )

    # Application role
    role: str = Field(
        default="customer",
        index=True,
        description="Application role: customer | admin",
    )

    phone: str | None = Field(default=None, max_length=20)
    address: str | None = Field(default=None, max_length=500)
    city: str | None = Field(default=None, max_length=100)
    postal_code: str | None = Field(default=None, max_length=20)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last profile change (UTC)",
    )

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
