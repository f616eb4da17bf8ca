"""
Shared fixtures.

Environment is configured before any `app` import so that the cached
settings and the engine point at an in-memory SQLite database.
"""
import os
import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["MEDIA_BASE_URL"] = "http://media.test/storage"
os.environ["PLACEHOLDER_IMAGE_URL"] = "http://media.test/images/placeholder.jpg"

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import Session, SQLModel

from app.database import engine
from app.main import app
from app.models.product import Category, Product
from app.models.user import User

API = "/api/apparel"


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def session():
    with Session(engine) as s:
        yield s


@pytest.fixture
def client():
    return TestClient(app)


def make_token(user: User, jti: str | None = None, expires_in: int = 3600) -> str:
    claims = {
        "sub": str(user.id),
        "email": user.email,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    if jti:
        claims["jti"] = jti
    return jwt.encode(claims, "test-secret", algorithm="HS256")


def auth_headers(user: User, jti: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user, jti)}"}


def _user(session: Session, email: str, role: str = "customer") -> User:
    user = User(id=uuid.uuid4(), email=email, name=email.split("@")[0], role=role)
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer(session):
    return _user(session, "alice@ares.shop")


@pytest.fixture
def other_customer(session):
    return _user(session, "bob@ares.shop")


@pytest.fixture
def admin(session):
    return _user(session, "admin@ares.shop", role="admin")


@pytest.fixture
def category(session):
    cat = Category(name="Men", slug="men")
    session.add(cat)
    session.commit()
    session.refresh(cat)
    return cat


@pytest.fixture
def make_product(session):
    """
    Factory: make_product(name, price, stock=20, **fields) -> Product
    """
    counter = {"n": 0}

    def _make(name: str, price: str | int, stock: int = 20, **fields) -> Product:
        counter["n"] += 1
        product = Product(
            name=name,
            slug=fields.pop("slug", f"{name.lower().replace(' ', '-')}-{counter['n']}"),
            price=Decimal(str(price)),
            stock=stock,
            **fields,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make
