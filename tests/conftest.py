# tests/conftest.py
import os
import uuid
from datetime import datetime, timedelta, timezone

# Settings are read at import time; configure before importing the app.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from remen_abs.database import get_session
from remen_abs.main import app
from remen_abs.models.product import Product
from remen_abs.models.user import User

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine):
    def override_get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    # Not entered as a context manager: startup would touch the real DB.
    yield TestClient(app)
    app.dependency_overrides.clear()


def make_token(user_id: uuid.UUID, email: str) -> str:
    claims = {
        "sub": str(user_id),
        "email": email,
        "exp": datetime.now(timezone.utc) + timedelta(hours=1),
    }
    return jwt.encode(claims, JWT_SECRET, algorithm="HS256")


def auth_headers(user_id: uuid.UUID, email: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, email)}"}


@pytest.fixture
def customer(session) -> User:
    user = User(id=uuid.uuid4(), email="buyer@example.com", name="buyer", role="user")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def admin(session) -> User:
    user = User(id=uuid.uuid4(), email="admin@example.com", name="admin", role="admin")
    session.add(user)
    session.commit()
    session.refresh(user)
    return user


@pytest.fixture
def customer_headers(customer) -> dict[str, str]:
    return auth_headers(customer.id, customer.email)


@pytest.fixture
def admin_headers(admin) -> dict[str, str]:
    return auth_headers(admin.id, admin.email)


@pytest.fixture
def make_product(session):
    def _make(name="ABS Module", brand="BMW", model="X5", price=45000, **extra) -> Product:
        product = Product(name=name, brand=brand, model=model, price=price, **extra)
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make
