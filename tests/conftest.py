"""
Pytest configuration and shared fixtures.

Environment variables are set before any app module is imported so the
global settings point at an in-memory SQLite database.
"""
import os

os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("SECRET_KEY", "test_secret_key")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from app.application.context import RequestContext
from app.db import connection
from app.db.connection import init_db, close_db
from app.main import app


@pytest_asyncio.fixture
async def db_session():
    """
    Fresh in-memory database and session per test.

    Disposing the engine drops the in-memory database, so nothing leaks
    between tests.
    """
    await init_db("sqlite+aiosqlite:///:memory:")

    async with connection.async_session_maker() as session:
        yield session

    await close_db()


@pytest.fixture
def ctx():
    """Request context with defaults and a fixed request ID"""
    return RequestContext(request_id="test-request")


@pytest.fixture
def client():
    """
    Test client with the app lifespan running.

    Lifespan creates (and afterwards drops) the in-memory database.
    """
    with TestClient(app) as test_client:
        yield test_client
