"""Pytest configuration and shared fixtures."""

import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "postgresql+asyncpg://b4:b4@localhost:5432/b4_test")
os.environ.setdefault("SUPABASE_URL", "https://project.supabase.co")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
os.environ.setdefault("RESEND_API_KEY", "")
os.environ.setdefault("AUTOSAVE_DEBOUNCE_SECONDS", "0.05")

import time
from typing import Iterator
from unittest.mock import AsyncMock, Mock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession

from b4_platform.core.database import get_async_session
from b4_platform.main import app
from b4_platform.schemas.auth import CurrentUser, JWTClaims

USER_ID = "5b1f6a52-3c2e-4d1b-9a51-0d6f3f0c9a11"
ADMIN_ID = "a7d0c0de-0000-4000-8000-00000000ad01"


def make_claims(user_id: str = USER_ID, email: str = "maya@b4platform.io", role: str = "authenticated") -> JWTClaims:
    now = int(time.time())
    return JWTClaims(
        sub=user_id,
        email=email,
        role=role,
        exp=now + 3600,
        iat=now,
        iss="https://project.supabase.co/auth/v1",
        user_metadata={"full_name": "Maya Levi"},
    )


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def mock_session():
    """Create a mock database session."""
    session = AsyncMock(spec=AsyncSession)
    session.add = Mock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.execute = AsyncMock()
    return session


@pytest.fixture
def override_session(mock_session):
    """Route every ``get_async_session`` dependency to the mock session."""
    async def _session():
        yield mock_session

    app.dependency_overrides[get_async_session] = _session
    return mock_session


@pytest.fixture
def current_user() -> CurrentUser:
    return CurrentUser.from_claims(make_claims())


@pytest.fixture
def admin_user() -> CurrentUser:
    user = CurrentUser.from_claims(
        make_claims(user_id=ADMIN_ID, email="admin@b4platform.io", role="admin")
    )
    user.is_admin = True
    return user


@pytest.fixture
def auth_headers(override_session) -> Iterator[dict]:
    """Bearer headers of a regular user; token verification is patched."""
    with patch(
        "b4_platform.core.jwt.JWTVerifier.verify_token",
        new=AsyncMock(return_value=make_claims()),
    ):
        yield {"Authorization": "Bearer user-token"}


@pytest.fixture
def admin_headers(override_session) -> Iterator[dict]:
    """Bearer headers of a user whose token carries the admin role."""
    with patch(
        "b4_platform.core.jwt.JWTVerifier.verify_token",
        new=AsyncMock(return_value=make_claims(ADMIN_ID, "admin@b4platform.io", "admin")),
    ):
        yield {"Authorization": "Bearer admin-token"}
