# app/models/product.py
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlmodel import SQLModel, Field


class Category(SQLModel, table=True):
    """
    Product category (men, women, footwear, accessories, ...).
    """

    __tablename__ = "categories"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        description="Display name",
    )

    slug: str = Field(
        max_length=120,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Product(SQLModel, table=True):
    """
    Product catalog entry.

    The cart never copies these fields: price, name and stock are
    re-read every time a cart is viewed.
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=255,
        index=True,
        description="Display name of the product",
    )

    slug: str = Field(
        max_length=255,
        unique=True,
        index=True,
        description="URL-friendly identifier (unique)",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: Decimal = Field(
        ge=0,
        max_digits=12,
        decimal_places=2,
        description="Unit price",
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    image: str | None = Field(
        default=None,
        description="Storage reference of the main image (or absolute URL)",
    )

    is_active: bool = Field(
        default=True,
        index=True,
        description="Whether this product is visible on the storefront",
    )

    is_featured: bool = Field(
        default=False,
        index=True,
    )

    category_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="categories.id",
        index=True,
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
