# app/routers/users.py
import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.auth import get_token_claims, require_auth, require_admin
from app.core.config import get_settings
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.common import ApiResponse
from app.schemas.user import ApiStatus, ProfileUpdate, UserPage, UserRead
from app.services.user_service import UserService

settings = get_settings()

router = APIRouter(tags=["Users"])

repo = UserRepository()
service = UserService(repo)


# -------- Self profile --------


@router.get("/profile", response_model=ApiResponse[UserRead])
def read_profile(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return ApiResponse(
        message="Profile retrieved successfully",
        data=service.to_read(current_user),
    )


@router.put("/profile", response_model=ApiResponse[UserRead])
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update the authenticated user's profile (partial update).

    Email and role cannot be changed here.
    """
    user = service.update_profile(session, current_user, payload)
    return ApiResponse(
        message="Profile updated successfully",
        data=service.to_read(user),
    )


@router.post("/logout", response_model=ApiResponse[None])
def logout(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    claims: dict[str, Any] = Depends(get_token_claims),
):
    """
    Revoke the bearer token used for this request.
    """
    service.logout(session, claims)
    return ApiResponse(message="Logged out successfully")


@router.get("/status", response_model=ApiResponse[ApiStatus])
def api_status(current_user: User = Depends(require_auth)):
    """
    Authenticated liveness check for the mobile app.
    """
    return ApiResponse(
        message="API is running",
        data=ApiStatus(
            service=settings.PROJECT_NAME,
            status="ACTIVE",
            authenticated_user=current_user.email,
            features=[
                "Bearer token authentication",
                "Product & category browsing",
                "Cart management",
                "Admin catalog management",
            ],
        ),
    )


# -------- Admin endpoints --------


@router.get(
    "/users",
    response_model=ApiResponse[UserPage],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    per_page: int = Query(15, ge=1, le=settings.MAX_PER_PAGE),
):
    """
    List all users (admin only).
    """
    return ApiResponse(
        message="Users retrieved successfully",
        data=service.list_users(session, page, per_page),
    )


@router.get(
    "/users/{user_id}",
    response_model=ApiResponse[UserRead],
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get a specific user by id (admin only).
    """
    return ApiResponse(
        message="User retrieved successfully",
        data=service.to_read(service.get_user(session, user_id)),
    )
