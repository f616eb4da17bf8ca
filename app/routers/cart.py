# app/routers/cart.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartClearRead,
    CartCountRead,
    CartItemCreate,
    CartItemRemove,
    CartItemUpdate,
    CartLineItemRead,
    CartRead,
)
from app.schemas.common import ApiResponse
from app.services import presenters
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=ApiResponse[CartRead])
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get the current user's cart: line items with live product data,
    plus totals.
    """
    view = service.view(session, current_user.id)
    return ApiResponse(
        message="Cart retrieved successfully",
        data=presenters.cart_read(view),
    )


@router.get("/count", response_model=ApiResponse[CartCountRead])
def get_cart_count(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Total number of units in the cart (sum of quantities).
    """
    count = service.item_count(session, current_user.id)
    return ApiResponse(
        message="Cart count retrieved successfully",
        data=CartCountRead(count=count),
    )


@router.post(
    "/add",
    response_model=ApiResponse[CartLineItemRead],
    status_code=status.HTTP_201_CREATED,
)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Add a product to the cart.

    If the product is already in the cart its quantity is increased.
    """
    entry = service.add_item(
        session, current_user.id, payload.product_id, payload.quantity
    )
    return ApiResponse(
        message="Item added to cart successfully",
        data=presenters.line_item_read(entry),
    )


@router.put("/update", response_model=ApiResponse[CartLineItemRead])
def update_cart_item(
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Set the quantity of a cart line item (replaces, does not add).
    """
    entry = service.update_quantity(
        session=session,
        user_id=current_user.id,
        item_id=payload.cart_item_id,
        quantity=payload.quantity,
    )
    return ApiResponse(
        message="Cart item updated successfully",
        data=presenters.line_item_read(entry),
    )


@router.delete("/remove", response_model=ApiResponse[None])
def remove_cart_item(
    payload: CartItemRemove,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Remove a line item from the cart.
    """
    service.remove_item(session, current_user.id, payload.cart_item_id)
    return ApiResponse(message="Item removed from cart successfully")


@router.delete("/clear", response_model=ApiResponse[CartClearRead])
def clear_cart(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Empty the cart. Clearing an empty cart is not an error.
    """
    removed = service.clear_cart(session, current_user.id)
    return ApiResponse(
        message=f"Cart cleared. {removed} items removed.",
        data=CartClearRead(removed=removed),
    )
