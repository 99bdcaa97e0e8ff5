"""
Fixtures for repository tests that run the SQL against a real PostgreSQL.

The container is started once per session. Each test gets a fresh pool on the
current event loop and an emptied schema.
"""
import os
from collections.abc import AsyncGenerator, Generator

import pytest
from docker.errors import DockerException
from testcontainers.postgres import PostgresContainer

from core import db
from core.config import Settings


@pytest.fixture(scope="session")
def postgres_container() -> Generator[PostgresContainer]:
    """Start a PostgreSQL container for the test session."""
    try:
        container = PostgresContainer("postgres:16", driver=None)
        container.start()
    except DockerException as exc:
        pytest.skip(f"Docker is not available: {exc}")
    try:
        yield container
    finally:
        container.stop()


@pytest.fixture(scope="session")
def database_url(postgres_container: PostgresContainer) -> str:
    """
    Point DATABASE_URL at the container.

    `db.init_pool` reads the URL from the environment, the same way the app does.
    """
    url = postgres_container.get_connection_url()
    os.environ["DATABASE_URL"] = url
    return url


@pytest.fixture
async def database(database_url: str) -> AsyncGenerator[None]:  # noqa: ARG001
    """Open the pool, create the schema and empty both tables afterwards."""
    await db.init_pool(Settings(db_pool_min_size=1, db_pool_max_size=2))
    await db.ensure_schema()
    try:
        yield
    finally:
        await db.execute("TRUNCATE bookmarks, users")
        await db.close_pool()
