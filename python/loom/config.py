"""Application settings loaded from environment variables.

Environment Configuration:
    LOOM_ENV: Deployment environment (local | test | staging | prod)
    DATABASE_URL: Async SQLAlchemy connection string (required)
    DB_POOL_SIZE: Connection pool size for the async engine
    DB_ECHO: Echo SQL statements (debugging only)

Auth Configuration (required in all environments):
    AUTH_JWT_SECRET: Shared HS256 signing secret for bearer tokens
    AUTH_JWT_ISSUER: Expected JWT issuer (trailing slash stripped)
    AUTH_JWT_AUDIENCES: Comma-separated list of allowed audiences

Logging:
    LOG_JSON: Render logs as JSON (true) or console-friendly lines (false)
"""

from enum import Enum
from functools import lru_cache
from typing import Annotated

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings

# Secrets shorter than this are rejected outside local/test
MIN_PRODUCTION_SECRET_LENGTH = 32


class Environment(str, Enum):
    """Valid deployment environments."""

    LOCAL = "local"
    TEST = "test"
    STAGING = "staging"
    PROD = "prod"


class Settings(BaseSettings):
    """Application configuration.

    Settings are loaded from environment variables.
    Validation rules:
    - DATABASE_URL is always required
    - AUTH_JWT_SECRET is always required
    - AUTH_JWT_SECRET must be at least 32 characters in staging and prod
    """

    loom_env: Environment = Field(default=Environment.LOCAL, alias="LOOM_ENV")
    database_url: Annotated[str, Field(alias="DATABASE_URL")]
    db_pool_size: int = Field(default=10, ge=1, alias="DB_POOL_SIZE")
    db_echo: bool = Field(default=False, alias="DB_ECHO")

    # Bearer token settings
    auth_jwt_secret: str | None = Field(default=None, alias="AUTH_JWT_SECRET")
    auth_jwt_issuer: str = Field(default="loom", alias="AUTH_JWT_ISSUER")
    auth_jwt_audiences: str = Field(default="loom-api", alias="AUTH_JWT_AUDIENCES")

    log_json: bool = Field(default=True, alias="LOG_JSON")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def validate_required_settings(self) -> "Settings":
        """Ensure auth settings are usable for the configured environment."""
        if not self.auth_jwt_secret:
            raise ValueError("AUTH_JWT_SECRET is required")

        if self.loom_env in (Environment.STAGING, Environment.PROD):
            if len(self.auth_jwt_secret) < MIN_PRODUCTION_SECRET_LENGTH:
                raise ValueError(
                    f"AUTH_JWT_SECRET must be at least {MIN_PRODUCTION_SECRET_LENGTH} "
                    f"characters for LOOM_ENV={self.loom_env.value}"
                )

        return self

    @property
    def audience_list(self) -> list[str]:
        """Parse comma-separated audiences into a list."""
        return [a.strip() for a in self.auth_jwt_audiences.split(",") if a.strip()]

    @property
    def normalized_issuer(self) -> str:
        """Return issuer with trailing slash stripped."""
        return self.auth_jwt_issuer.rstrip("/")


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Returns:
        Settings instance loaded from environment.

    Raises:
        ValidationError: If required settings are missing or invalid.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache. Useful for testing."""
    get_settings.cache_clear()
