"""Pytest configuration and fixtures for Loom tests.

Test isolation strategy:
- Each test gets its own SQLite database file (aiosqlite) with the schema
  created from the ORM metadata
- unaccent() is registered as a SQLite function so accent-insensitive
  matching behaves as it does on PostgreSQL
- Route tests use an app with auth middleware wired to the test database
  and the HS256 test secret
"""

import os
import sys
import unicodedata
from collections.abc import AsyncGenerator
from pathlib import Path

# Settings are read lazily, but must be valid before the app is created
os.environ.setdefault("LOOM_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-that-is-long-enough-for-hs256")
os.environ.setdefault("AUTH_JWT_ISSUER", "test-issuer")
os.environ.setdefault("AUTH_JWT_AUDIENCES", "test-audience")
os.environ.setdefault("LOG_JSON", "false")

# Add repo root to sys.path for importing top-level packages (e.g., apps)
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import NullPool

from loom.api.deps import get_session_factory
from loom.app import create_app
from loom.auth.actor import load_actor
from loom.auth.middleware import AuthMiddleware
from loom.auth.verifier import JwtVerifier
from loom.config import clear_settings_cache
from loom.db.models import Base
from loom.db.session import SessionFactory, create_session_factory
from tests.helpers import TEST_AUDIENCE, TEST_ISSUER, TEST_SECRET


# Letters PostgreSQL's unaccent.rules maps that NFKD leaves alone
_UNACCENT_RULES = str.maketrans(
    {"Ł": "L", "ł": "l", "ß": "ss", "ẞ": "SS", "Ø": "O", "ø": "o", "Æ": "AE", "æ": "ae"}
)


def _unaccent(value: str | None) -> str | None:
    if value is None:
        return None
    decomposed = unicodedata.normalize("NFKD", value.translate(_UNACCENT_RULES))
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh database for a single test.

    A file database (rather than :memory:) lets every session see the same
    data while concurrent lookups each hold their own connection.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'loom.db'}",
        poolclass=NullPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def register_functions(dbapi_connection, connection_record):
        dbapi_connection.create_function("unaccent", 1, _unaccent)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> SessionFactory:
    """Provide a session factory bound to the test database."""
    return create_session_factory(engine)


@pytest_asyncio.fixture
async def db_session(session_factory: SessionFactory) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session for arranging test data."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def test_verifier() -> JwtVerifier:
    """Provide a verifier matching tokens minted by tests.helpers."""
    return JwtVerifier(secret=TEST_SECRET, issuer=TEST_ISSUER, audiences=[TEST_AUDIENCE])


@pytest.fixture
def authenticated_app(session_factory: SessionFactory, test_verifier: JwtVerifier) -> FastAPI:
    """Provide a FastAPI app with auth middleware bound to the test database."""

    async def actor_loader(user_id):
        async with session_factory() as session:
            return await load_actor(session, user_id)

    app = create_app(skip_auth_middleware=True)
    app.add_middleware(AuthMiddleware, verifier=test_verifier, actor_loader=actor_loader)
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    return app


@pytest_asyncio.fixture
async def authenticated_client(
    authenticated_app: FastAPI,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Provide an async HTTP client for the authenticated app.

    Use auth_headers() to generate valid tokens for requests.
    """
    transport = httpx.ASGITransport(app=authenticated_app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Provide an async HTTP client for an app without auth middleware."""
    app = create_app(skip_auth_middleware=True)
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset the settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
