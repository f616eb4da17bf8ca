# app/schemas/product.py
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from app.schemas.common import Pagination


# ----- Read models -----


class CategoryBrief(SQLModel):
    """
    Category as embedded in product payloads.
    Products without a category show id/slug = null, name = "Uncategorized".
    """

    id: uuid.UUID | None = None
    name: str = "Uncategorized"
    slug: str | None = None


class ProductRead(SQLModel):
    """
    Product card representation (listings, homepage, search).
    """

    id: uuid.UUID
    name: str
    slug: str
    description: str
    price: float
    formatted_price: str
    image: str
    stock: int
    stock_status: str
    is_featured: bool
    category: CategoryBrief


class ProductDetailRead(ProductRead):
    """
    Product detail page representation.
    """

    is_active: bool
    created_at: datetime
    updated_at: datetime


class ProductPage(SQLModel):
    products: list[ProductRead]
    pagination: Pagination


class CategoryRead(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    image: str
    product_count: int = 0


class CategoryHero(SQLModel):
    img: str
    title: str
    subtitle: str


class CategoryWithHero(SQLModel):
    id: uuid.UUID
    name: str
    slug: str
    hero: CategoryHero


class CategoryPage(SQLModel):
    category: CategoryWithHero
    products: list[ProductRead]
    pagination: Pagination


class CategoryStats(SQLModel):
    category: CategoryBrief
    total_products: int
    active_products: int
    total_stock: int
    min_price: float | None = None
    max_price: float | None = None
    avg_price: float | None = None
    formatted_avg_price: str | None = None


# ----- Admin payloads -----


class ProductCreate(SQLModel):
    """
    Payload for creating a product.

    - slug is optional: if omitted, generated from `name`.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=255)
    slug: str | None = None
    description: str | None = None
    price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    stock: int = Field(default=0, ge=0)
    image: str | None = None
    is_active: bool = True
    is_featured: bool = False
    category_id: uuid.UUID | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v

    @field_validator("slug")
    @classmethod
    def normalize_slug(cls, v: str | None) -> str | None:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("slug cannot be empty if provided")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=255)
    slug: str | None = None
    description: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    stock: int | None = Field(default=None, ge=0)
    image: str | None = None
    is_active: bool | None = None
    is_featured: bool | None = None
    category_id: uuid.UUID | None = None

    @field_validator("name", "slug")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class CategoryCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    slug: str | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty")
        return v


class CategoryUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    slug: str | None = None
