# app/database.py
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from app.core import exceptions
from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# ---------------------------------------------------------
# Postgres connection (production)
#
# - sslmode=require   : enforce SSL for remote databases
# - pool_size=5       : small fixed pool per worker process
# - pool_pre_ping=True: validate connections before using them
#
# SQLite (local runs and tests) shares a single in-process
# connection so that an in-memory database survives across
# sessions and threads.
# ---------------------------------------------------------

db_url = settings.DATABASE_URL


def _is_local_host(url: str) -> bool:
    return "@localhost" in url or "@127.0.0.1" in url


if db_url.startswith("sqlite"):
    engine = create_engine(
        db_url,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    # Append sslmode=require if it is not already present
    if "sslmode=" not in db_url and not _is_local_host(db_url):
        if "?" in db_url:
            db_url = db_url + "&sslmode=require"
        else:
            db_url = db_url + "?sslmode=require"

    engine = create_engine(
        db_url,
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=5,
    )


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    """
    FastAPI dependency that yields a SQLModel Session.

    One session is one unit of work: every cart mutation commits
    (or rolls back) inside the request that opened it.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(engine) as session:
        yield session


@contextmanager
def storage_errors(session: Session, action: str):
    """
    Roll back and re-raise SQLAlchemy failures as StorageError so they
    reach the client in the standard error envelope.
    """
    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception("Storage failure during %s", action)
        raise exceptions.StorageError() from exc
