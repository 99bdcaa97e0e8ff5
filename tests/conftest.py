"""Pytest fixtures for testing."""
from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from auth import security
from core.config import Settings
from fakes import InMemoryStore
from main import create_app

TEST_SECRET = "test-jwt-secret-key-for-testing-only"
TEST_BCRYPT_ROUNDS = 4


@pytest.fixture
def settings() -> Settings:
    """Settings with a fixed secret and the cheapest bcrypt cost."""
    return Settings(jwt_secret=TEST_SECRET, bcrypt_rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def tokens(settings: Settings) -> security.TokenCodec:
    return security.TokenCodec(secret=settings.jwt_secret, algorithm=settings.jwt_algorithm)


@pytest.fixture
def store(monkeypatch: pytest.MonkeyPatch) -> InMemoryStore:
    """Replace the database-backed repositories with an in-memory store."""
    fake = InMemoryStore()
    fake.install(monkeypatch)
    return fake


@pytest.fixture
def app(settings: Settings, store: InMemoryStore) -> FastAPI:  # noqa: ARG001
    return create_app(settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """
    HTTP client bound to the app.

    ASGITransport does not run the lifespan, so no database pool is opened.
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c
