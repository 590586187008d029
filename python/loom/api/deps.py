"""FastAPI dependencies for route handlers.

Common dependencies like the database session factory and the actor.
"""

from loom.auth.middleware import get_actor
from loom.db.session import SessionFactory, get_session_factory

__all__ = ["SessionFactory", "get_actor", "get_session_factory"]
