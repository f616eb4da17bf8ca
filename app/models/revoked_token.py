# app/models/revoked_token.py
from datetime import datetime

from sqlmodel import SQLModel, Field


class RevokedToken(SQLModel, table=True):
    """
    An access token that was logged out before it expired.

    Only the token's `jti` claim is stored. Rows past `expires_at` are
    harmless: the token would be rejected for being expired anyway.
    """

    __tablename__ = "revoked_tokens"

    jti: str = Field(
        primary_key=True,
        max_length=255,
        description="JWT ID claim of the revoked token",
    )

    expires_at: datetime = Field(
        description="Original token expiry (UTC)",
    )
