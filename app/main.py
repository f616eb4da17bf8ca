# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core import exceptions
from app.core.config import get_settings
from app.database import create_db_and_tables

# Import models so SQLModel metadata is populated before create_all()
from app.models import user as _user_models  # noqa: F401
from app.models import revoked_token as _revoked_token_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401
from app.models import cart as _cart_models  # noqa: F401

# Routers
from app.routers.homepage import router as homepage_router
from app.routers.users import router as users_router
from app.routers.products import router as products_router
from app.routers.categories import router as categories_router
from app.routers.cart import router as cart_router

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to database...")
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception as e:
        logger.error(f"Startup: DB connection FAILED: {e}")
        raise
    yield
    logger.info("Shutdown complete.")


# --- Error envelopes ---

ERROR_STATUS: dict[type[exceptions.AppError], int] = {
    exceptions.ValidationError: status.HTTP_422_UNPROCESSABLE_ENTITY,
    exceptions.NotFoundError: status.HTTP_404_NOT_FOUND,
    exceptions.ConflictError: status.HTTP_409_CONFLICT,
    exceptions.AuthenticationError: status.HTTP_401_UNAUTHORIZED,
    exceptions.PermissionDeniedError: status.HTTP_403_FORBIDDEN,
    exceptions.StorageError: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def error_body(message: str, code: str, **extra) -> dict:
    return {
        "success": False,
        "message": message,
        "error": {"code": code, "message": message},
        **extra,
    }


def create_exception_handler(status_code: int):
    async def exception_handler(request: Request, exc: exceptions.AppError):
        headers = None
        if isinstance(exc, exceptions.AuthenticationError):
            headers = {"WWW-Authenticate": "Bearer"}
        return JSONResponse(
            status_code=status_code,
            content=error_body(exc.message, exc.code),
            headers=headers,
        )

    return exception_handler


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors: dict[str, list[str]] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"] if p not in ("body", "query", "path"))
        errors.setdefault(field or "request", []).append(err["msg"])
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body("Validation failed", "validation_error", errors=errors),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), f"http_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    for exc_class, status_code in ERROR_STATUS.items():
        app.add_exception_handler(exc_class, create_exception_handler(status_code))
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # Versioned API prefix, e.g. /api/apparel
    app.include_router(homepage_router, prefix=settings.API_PREFIX)
    app.include_router(users_router, prefix=settings.API_PREFIX)
    app.include_router(products_router, prefix=settings.API_PREFIX)
    app.include_router(categories_router, prefix=settings.API_PREFIX)
    app.include_router(cart_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root():
        """Health check endpoint."""
        return {"status": "ok", "service": "ares-apparel-api"}

    return app


app = create_app()
