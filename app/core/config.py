# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (Postgres connection string, or sqlite:// for local runs)
      - JWT_SECRET (HS256 secret shared with the identity provider)

    Everything else has a sensible default for the ARES storefront.
    """

    PROJECT_NAME: str = "ARES Apparel Store API"
    API_PREFIX: str = "/api/apparel"

    DATABASE_URL: str

    # JWT verification (tokens are issued by the identity provider)
    JWT_SECRET: str
    JWT_ALG: str = "HS256"

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    LOG_LEVEL: str = "INFO"

    # Presentation
    CURRENCY_PREFIX: str = "Rs."
    LOW_STOCK_THRESHOLD: int = 10
    MEDIA_BASE_URL: str = "http://localhost:8000/storage"
    PLACEHOLDER_IMAGE_URL: str = "http://localhost:8000/images/placeholder.jpg"

    # Catalog listing
    DEFAULT_PER_PAGE: int = 12
    MAX_PER_PAGE: int = 100
    FEATURED_LIMIT: int = 8
    FEATURED_RECENT_DAYS: int = 30

    # Cart
    MAX_CART_QUANTITY: int = 999

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
