# app/repositories/user_repo.py
import uuid
from datetime import datetime

from sqlalchemy import func
from sqlmodel import Session, select

from app.models.revoked_token import RevokedToken
from app.models.user import User


class UserRepository:
    """
    Data access layer for User and revoked access tokens.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Users -----

    def get_by_id(self, session: Session, user_id: uuid.UUID) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def list_users(
        self, session: Session, offset: int = 0, limit: int = 15
    ) -> tuple[list[User], int]:
        """
        Paginated user listing, oldest accounts first.

        Returns:
            (users on this page, total number of users)
        """
        total = session.exec(select(func.count(User.id))).one()
        stmt = select(User).order_by(User.created_at, User.id).offset(offset).limit(limit)
        return list(session.exec(stmt).all()), int(total)

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    # ----- Revoked tokens -----

    def is_token_revoked(self, session: Session, jti: str) -> bool:
        return session.get(RevokedToken, jti) is not None

    def revoke_token(self, session: Session, jti: str, expires_at: datetime) -> None:
        """Record a logged-out token. Revoking twice is a no-op."""
        if self.is_token_revoked(session, jti):
            return
        session.add(RevokedToken(jti=jti, expires_at=expires_at))
        session.commit()
