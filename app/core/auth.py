# app/core/auth.py
import logging
import uuid
from typing import Any

from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from app.core import exceptions
from app.core.config import get_settings
from app.database import get_session, storage_errors
from app.models.user import User
from app.repositories.user_repo import UserRepository

settings = get_settings()
logger = logging.getLogger(__name__)

user_repo = UserRepository()

# HTTP Bearer scheme:
# - auto_error=False => missing Authorization header will NOT raise immediately
#   so public routes can share the same dependency (guest mode).
bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify an access token (JWT) issued by the identity provider.

    Verification:
      - signature (JWT_ALG using JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (providers vary)

    Raises:
        AuthenticationError: if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise exceptions.AuthenticationError("Invalid or expired token")


def _default_name_from_email(email: str) -> str:
    """
    Derive a default display name from email if the user has not
    completed their profile yet.
    """
    if "@" in email:
        return email.split("@", 1)[0]
    return email


def get_token_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, Any] | None:
    """Verified JWT claims, or None when no bearer token was sent."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)


def get_current_user(
    claims: dict[str, Any] | None = Depends(get_token_claims),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from the access token.

    Flow:
      1. No Authorization header => guest => return None.
      2. Reject tokens whose 'jti' was revoked by logout.
      3. Extract 'sub' (user id, UUID) and 'email'.
      4. Find the user profile; auto-provision a minimal one if missing.

    Raises:
        AuthenticationError: if token is revoked or missing required claims.
    """
    if claims is None:
        return None  # guest mode

    jti = claims.get("jti")
    if jti:
        with storage_errors(session, "token revocation check"):
            revoked = user_repo.is_token_revoked(session, jti)
        if revoked:
            raise exceptions.AuthenticationError("Token has been revoked")

    sub = claims.get("sub")
    email = claims.get("email")
    if not sub or not email:
        raise exceptions.AuthenticationError("Token missing sub/email")

    try:
        sub_uuid = uuid.UUID(str(sub))
    except ValueError:
        raise exceptions.AuthenticationError("Invalid sub in token")

    with storage_errors(session, "user lookup"):
        user = user_repo.get_by_id(session, sub_uuid)

        # Auto-provision profile if not found yet.
        # Default role = "customer" (admin must be manually promoted).
        if user is None:
            user = user_repo.create(
                session,
                User(
                    id=sub_uuid,
                    email=email,
                    name=_default_name_from_email(email),
                    role="customer",
                ),
            )
            logger.info("Provisioned profile for user %s", user.id)

    return user


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    Enforce authentication.

    Raises:
        AuthenticationError: if the request carries no token.
    """
    if user is None:
        raise exceptions.AuthenticationError()
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Enforce admin role.

    Raises:
        PermissionDeniedError: if role is not admin.
    """
    if not user.is_admin:
        raise exceptions.PermissionDeniedError("Admin access required")
    return user
