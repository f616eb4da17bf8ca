# app/services/user_service.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlmodel import Session

from app.core import exceptions
from app.database import storage_errors
from app.models.user import User
from app.repositories.user_repo import UserRepository
from app.schemas.common import Pagination
from app.schemas.user import ProfileUpdate, UserPage, UserRead

logger = logging.getLogger(__name__)


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - profile reads and edits (email/role are not editable)
      - logout by revoking the token's jti
      - admin listings
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    @staticmethod
    def to_read(user: User) -> UserRead:
        return UserRead(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            phone=user.phone,
            address=user.address,
            city=user.city,
            postal_code=user.postal_code,
            is_admin=user.is_admin,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )

    # ----- Self profile -----

    def update_profile(
        self,
        session: Session,
        current_user: User,
        payload: ProfileUpdate,
    ) -> User:
        """
        Partial update: only fields present in the payload are written.
        """
        for key, value in payload.model_dump(exclude_unset=True).items():
            if key == "name" and value is None:
                continue
            setattr(current_user, key, value)
        current_user.updated_at = datetime.now(timezone.utc)
        with storage_errors(session, "profile update"):
            return self.repo.update(session, current_user)

    def logout(self, session: Session, claims: dict[str, Any]) -> None:
        """
        Revoke the presented access token.

        Tokens without a 'jti' claim cannot be revoked server-side; the
        client simply discards them.
        """
        jti = claims.get("jti")
        if not jti:
            logger.info("Logout for token without jti (sub=%s)", claims.get("sub"))
            return

        exp = claims.get("exp")
        expires_at = (
            datetime.fromtimestamp(exp, tz=timezone.utc)
            if exp
            else datetime.now(timezone.utc)
        )
        with storage_errors(session, "logout"):
            self.repo.revoke_token(session, jti, expires_at)

    # ----- Admin operations -----

    def list_users(self, session: Session, page: int, per_page: int) -> UserPage:
        """List users with pagination (admin only)."""
        with storage_errors(session, "user listing"):
            users, total = self.repo.list_users(
                session, offset=(page - 1) * per_page, limit=per_page
            )
        return UserPage(
            users=[self.to_read(u) for u in users],
            pagination=Pagination.build(page, per_page, total, len(users)),
        )

    def get_user(self, session: Session, user_id: uuid.UUID) -> User:
        """
        Get a user by id (admin only).

        Raises:
            NotFoundError: if not found.
        """
        with storage_errors(session, "user lookup"):
            user = self.repo.get_by_id(session, user_id)
        if not user:
            raise exceptions.NotFoundError("User not found")
        return user
