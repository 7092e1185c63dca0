# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Settings are read at import time; point them at SQLite before anything loads
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AUTH_ENABLED", "false")

from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from crm_access.core.auth import create_access_token, hash_password
from crm_access.core.config import settings
from crm_access.core.database import Base, get_db
from crm_access.core.grants import Principal
from crm_access.main import app as fastapi_app
from crm_access.models.user import User


@pytest.fixture(scope="function")
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    TestingSession = sessionmaker(bind=db_engine, autoflush=False)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(db_engine) -> Generator[TestClient, None, None]:
    """Create a test client bound to the in-memory database."""
    TestingSession = sessionmaker(bind=db_engine, autoflush=False)

    def _get_test_db():
        db = TestingSession()
        try:
            yield db
        finally:
            db.close()

    fastapi_app.dependency_overrides[get_db] = _get_test_db
    with TestClient(fastapi_app) as test_client:
        yield test_client
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def auth_enabled(monkeypatch):
    """Turn on permission enforcement for the duration of a test."""
    monkeypatch.setattr(settings, "AUTH_ENABLED", True)


@pytest.fixture
def make_user(db_session):
    """Insert a user straight into the database."""

    def _make_user(
        email: str = "vendedor@example.com",
        senha: str = "secret123",
        funcao: str = "vendedor",
        permissoes=None,
        ativo: bool = True,
    ) -> User:
        user = User(
            nome="Test User",
            email=email,
            funcao=funcao,
            password_hash=hash_password(senha),
            permissoes=permissoes if permissoes is not None else {},
            ativo=ativo,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def token_for():
    """Build a bearer header for an arbitrary principal payload."""

    def _token_for(payload: dict) -> dict:
        token = create_access_token(Principal.from_payload(payload))
        return {"Authorization": f"Bearer {token}"}

    return _token_for


@pytest.fixture
def admin_headers(token_for) -> dict:
    return token_for({"id": "admin-1", "role": "admin", "permissions": {}})


@pytest.fixture
def seller_principal() -> Principal:
    return Principal.from_payload({
        "id": "42",
        "role": "vendedor",
        "permissions": {"leads": {"view": "own", "edit": "own", "delete": False}},
    })
