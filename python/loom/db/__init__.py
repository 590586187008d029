"""Database module for Loom.

Provides async engine creation, session factories, and ORM models.
"""

from loom.db.engine import create_db_engine, dispose_engine, get_engine
from loom.db.models import (
    Base,
    Collection,
    CollectionPermission,
    CollectionUser,
    Document,
    Group,
    GroupUser,
    StatusFilter,
    Team,
    TeamPreference,
    User,
    UserRole,
)
from loom.db.session import create_session_factory, get_session_factory

__all__ = [
    # Engine and session
    "create_db_engine",
    "dispose_engine",
    "get_engine",
    "create_session_factory",
    "get_session_factory",
    # Base
    "Base",
    # Enums
    "UserRole",
    "TeamPreference",
    "CollectionPermission",
    "StatusFilter",
    # Models
    "Team",
    "User",
    "Group",
    "GroupUser",
    "Collection",
    "CollectionUser",
    "Document",
]
