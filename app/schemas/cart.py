# app/schemas/cart.py
import uuid
from datetime import datetime
from typing import Literal

from sqlmodel import SQLModel, Field

from app.core.config import get_settings
from app.schemas.product import CategoryBrief

settings = get_settings()


# ----- Payloads -----


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.
    Adding a product already in the cart increments its quantity.
    """

    product_id: uuid.UUID
    quantity: int = Field(ge=1, le=settings.MAX_CART_QUANTITY)


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line item (replaces it).
    """

    cart_item_id: uuid.UUID
    quantity: int = Field(ge=1, le=settings.MAX_CART_QUANTITY)


class CartItemRemove(SQLModel):
    cart_item_id: uuid.UUID


# ----- Read models -----


class CartProductRead(SQLModel):
    """
    Live product data joined into a cart line.
    """

    id: uuid.UUID
    name: str
    slug: str
    price: float
    formatted_price: str
    image: str
    stock: int
    stock_status: str
    category: CategoryBrief


class CartEntryRead(SQLModel):
    """
    One line of the cart view.

    status:
      - "resolved": product is set, subtotal is quantity x current price
      - "orphaned": the product was removed from the catalog; product and
        subtotal are null and the line does not count towards total_price
    """

    id: uuid.UUID
    status: Literal["resolved", "orphaned"]
    product_id: uuid.UUID
    quantity: int
    product: CartProductRead | None = None
    subtotal: float | None = None
    formatted_subtotal: str | None = None


class CartSummaryRead(SQLModel):
    total_items: int
    total_price: float
    formatted_total: str
    is_empty: bool
    orphaned_items: int = 0


class CartRead(SQLModel):
    """
    Full cart response: items + summary, recomputed on every request.
    """

    items: list[CartEntryRead]
    summary: CartSummaryRead


class CartLineItemRead(SQLModel):
    """
    A single line item as returned by add/update.
    """

    id: uuid.UUID
    user_id: uuid.UUID
    product_id: uuid.UUID
    quantity: int
    created_at: datetime
    updated_at: datetime
    product: CartProductRead | None = None


class CartCountRead(SQLModel):
    count: int


class CartClearRead(SQLModel):
    removed: int
