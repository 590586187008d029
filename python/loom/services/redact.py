"""Hashing and log guard utilities.

Never-log policy:
- Bearer tokens and signing secrets
- Raw search queries
- Email addresses

Allowed (with suffix):
- _chars, _len: length of text
- _sha256, _hash: hash of text
"""

import hashlib
import os

import structlog

FORBIDDEN_KEYS = frozenset(
    {
        "query",
        "email",
        "bearer",
        "token",
        "secret",
        "password",
        "raw_body",
    }
)


def hash_text(value: str) -> str:
    """SHA-256 hex digest of a string.

    Stable: same input always produces same output.
    Used for log correlation without exposing content.
    """
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def safe_kv(*, _env: str | None = None, **kwargs) -> dict:
    """Validate that no forbidden keys are present unless already redacted.

    Usage:
        logger.info("suggestions_served", **safe_kv(
            query_len=12,             # OK: _len suffix
            query_hash="abc123",      # OK: _hash suffix
            # query="hello",          # BLOCKED: forbidden key
        ))

    Args:
        _env: Override for LOOM_ENV (test-only). If None, reads from env.
        **kwargs: Keyword arguments to validate and return.

    Returns:
        The same kwargs dict, after validation.

    Raises:
        ValueError: In local/test, if a forbidden key is used without redacted suffix.
    """
    violations = [key for key in kwargs if key in FORBIDDEN_KEYS]

    if violations:
        msg = f"Forbidden log keys without redacted suffix: {violations}"
        env = _env or os.environ.get("LOOM_ENV", "local")
        if env in ("local", "test"):
            raise ValueError(msg)
        structlog.get_logger("loom.services.redact").warning(
            "safe_kv_violation", forbidden_keys=violations
        )
        for key in violations:
            kwargs.pop(key)

    return kwargs
