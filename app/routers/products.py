# app/routers/products.py
import uuid
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.core.config import get_settings
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ApiResponse
from app.schemas.product import (
    ProductCreate,
    ProductDetailRead,
    ProductPage,
    ProductRead,
    ProductUpdate,
)
from app.services.product_service import ProductService

settings = get_settings()

router = APIRouter(tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("/products", response_model=ApiResponse[ProductPage])
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
    category: str | None = Query(None, description="Category slug"),
    featured: str | None = Query(None, description="'true' or '1' for featured/new"),
):
    """
    List active products, newest first.

    - Public endpoint.
    - `category` filters by category slug (unknown slugs are ignored).
    - `featured=true` keeps featured or recently added products.
    """
    data = service.list_products(
        session,
        page=page,
        per_page=per_page,
        category_slug=category,
        featured=featured in {"true", "1"},
    )
    return ApiResponse(message="Products retrieved successfully", data=data)


@router.get("/products/search", response_model=ApiResponse[ProductPage])
def search_products(
    session: Session = Depends(get_session),
    q: str | None = None,
    category: uuid.UUID | None = Query(None, description="Category id"),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=settings.MAX_PER_PAGE),
):
    """
    Search products by name/description with optional price range.
    """
    data = service.search_products(
        session,
        query=q,
        category_id=category,
        min_price=min_price,
        max_price=max_price,
        page=page,
        per_page=per_page,
    )
    return ApiResponse(message="Search completed successfully", data=data)


@router.get("/products/featured", response_model=ApiResponse[list[ProductRead]])
def featured_products(session: Session = Depends(get_session)):
    """
    Featured or recently added products (homepage strip).
    """
    return ApiResponse(
        message="Featured products retrieved successfully",
        data=service.featured_products(session),
    )


@router.get("/products/{id_or_slug}", response_model=ApiResponse[ProductDetailRead])
def get_product(
    id_or_slug: str,
    session: Session = Depends(get_session),
):
    """
    Get a single product by id or, failing that, by slug.
    """
    product = service.find_product(session, id_or_slug)
    return ApiResponse(
        message="Product retrieved successfully",
        data=service.product_detail(session, product),
    )


# -------- Admin endpoints --------


@router.post(
    "/admin/products",
    response_model=ApiResponse[ProductDetailRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only).
    """
    product = service.create_product(session, payload)
    return ApiResponse(
        message="Product created successfully",
        data=service.product_detail(session, product),
    )


@router.put(
    "/admin/products/{product_id}",
    response_model=ApiResponse[ProductDetailRead],
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Update an existing product (admin only).
    """
    product = service.update_product(session, product_id, payload)
    return ApiResponse(
        message="Product updated successfully",
        data=service.product_detail(session, product),
    )


@router.delete(
    "/admin/products/{product_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a product (admin only).
    """
    service.delete_product(session, product_id)
    return ApiResponse(message="Product deleted successfully")
