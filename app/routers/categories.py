# app/routers/categories.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.core.config import get_settings
from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ApiResponse
from app.schemas.product import (
    CategoryCreate,
    CategoryPage,
    CategoryRead,
    CategoryStats,
    CategoryUpdate,
    ProductPage,
)
from app.services.product_service import ProductService

settings = get_settings()

router = APIRouter(tags=["Categories"])

service = ProductService(ProductRepository())


@router.get("/categories", response_model=ApiResponse[list[CategoryRead]])
def list_categories(session: Session = Depends(get_session)):
    """All categories with their active product counts."""
    return ApiResponse(
        message="Categories retrieved successfully",
        data=service.list_categories(session),
    )


# Must be declared before /categories/{category_id}/... routes
@router.get("/categories/{slug}/page", response_model=ApiResponse[CategoryPage])
def category_page(
    slug: str,
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
):
    """
    Category landing page (banner + products), looked up by slug.
    """
    return ApiResponse(
        message="Category products retrieved successfully",
        data=service.category_page(session, slug, page, per_page),
    )


@router.get("/categories/{category_id}", response_model=ApiResponse[CategoryRead])
def get_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    return ApiResponse(
        message="Category retrieved successfully",
        data=service.category_detail(session, category_id),
    )


@router.get(
    "/categories/{category_id}/products",
    response_model=ApiResponse[ProductPage],
)
def category_products(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(settings.DEFAULT_PER_PAGE, ge=1, le=settings.MAX_PER_PAGE),
):
    return ApiResponse(
        message="Category products retrieved successfully",
        data=service.category_products(session, category_id, page, per_page),
    )


@router.get(
    "/categories/{category_id}/stats",
    response_model=ApiResponse[CategoryStats],
)
def category_stats(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Product count, stock and price range for one category.
    """
    return ApiResponse(
        message="Category statistics retrieved successfully",
        data=service.category_stats(session, category_id),
    )


# -------- Admin endpoints --------


@router.post(
    "/admin/categories",
    response_model=ApiResponse[CategoryRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
):
    category = service.create_category(session, payload)
    return ApiResponse(
        message="Category created successfully",
        data=service.category_read(category),
    )


@router.put(
    "/admin/categories/{category_id}",
    response_model=ApiResponse[CategoryRead],
    dependencies=[Depends(require_admin)],
)
def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
):
    category = service.update_category(session, category_id, payload)
    return ApiResponse(
        message="Category updated successfully",
        data=service.category_detail(session, category.id),
    )


@router.delete(
    "/admin/categories/{category_id}",
    response_model=ApiResponse[None],
    dependencies=[Depends(require_admin)],
)
def delete_category(
    category_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Delete a category (admin only). Its products become uncategorized.
    """
    service.delete_category(session, category_id)
    return ApiResponse(message="Category deleted successfully")
