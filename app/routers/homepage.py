# app/routers/homepage.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.database import get_session
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ApiResponse
from app.services.homepage_service import HomepageService
from app.services.product_service import ProductService

router = APIRouter(tags=["Homepage"])

service = HomepageService(ProductService(ProductRepository()))


@router.get("/homepage", response_model=ApiResponse[dict])
@router.get("/home", response_model=ApiResponse[dict], include_in_schema=False)
def homepage(session: Session = Depends(get_session)):
    """
    Home screen data: carousel, main categories, featured products.
    """
    return ApiResponse(
        message="Homepage data retrieved successfully",
        data=service.homepage(session),
    )
