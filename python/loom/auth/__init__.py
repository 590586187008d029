"""Authentication and authorization module.

This module provides:
- Token verification (HS256 bearer tokens)
- Auth middleware for FastAPI
- Request state with the authenticated actor
- Field-level capability checks for user records
"""

from loom.auth.actor import Actor, load_actor
from loom.auth.middleware import AuthMiddleware, get_actor
from loom.auth.permissions import authorize
from loom.auth.verifier import JwtVerifier, TokenVerifier

__all__ = [
    "Actor",
    "load_actor",
    "AuthMiddleware",
    "get_actor",
    "authorize",
    "JwtVerifier",
    "TokenVerifier",
]
