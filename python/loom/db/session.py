"""Database session management.

Provides:
- Session factory creation bound to the async engine
- The default session factory via get_session_factory() dependency

Read paths that fan out concurrently take the session factory rather than a
session: an AsyncSession must not be used by more than one task at a time.
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from loom.db.engine import get_engine

SessionFactory = async_sessionmaker[AsyncSession]


def create_session_factory(engine: AsyncEngine | None = None) -> SessionFactory:
    """Create a session factory bound to an engine.

    Args:
        engine: Async engine. If None, uses the default engine.

    Returns:
        Configured async_sessionmaker instance.
    """
    if engine is None:
        engine = get_engine()

    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


# Default session factory - created lazily
_SessionLocal: SessionFactory | None = None


def get_session_factory() -> SessionFactory:
    """Get or create the default session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = create_session_factory()
    return _SessionLocal


def reset_session_factory() -> None:
    """Forget the default session factory (after the engine is disposed)."""
    global _SessionLocal
    _SessionLocal = None

