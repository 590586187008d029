"""Mention suggestion Pydantic schemas.

Contains the request body and response models for POST /suggestions.mention.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from loom.db.models import CollectionPermission, UserRole

__all__ = [
    "DEFAULT_LIMIT",
    "MAX_LIMIT",
    "MAX_QUERY_LENGTH",
    "SuggestionsMentionRequest",
    "DocumentOut",
    "UserOut",
    "GroupOut",
    "CollectionOut",
    "SuggestionsPagination",
    "SuggestionsData",
    "SuggestionsResponse",
]

DEFAULT_LIMIT = 25
MAX_LIMIT = 100
MAX_QUERY_LENGTH = 255

# =============================================================================
# Request Schemas
# =============================================================================


class SuggestionsMentionRequest(BaseModel):
    """Request body for mention suggestions."""

    model_config = ConfigDict(extra="forbid")

    query: str | None = Field(
        default=None, max_length=MAX_QUERY_LENGTH, description="Free-text filter (optional)"
    )
    offset: int = Field(default=0, ge=0, description="Number of results to skip per type")
    limit: int = Field(
        default=DEFAULT_LIMIT,
        ge=1,
        le=MAX_LIMIT,
        description=f"Maximum results per type (1-{MAX_LIMIT})",
    )


# =============================================================================
# Response Schemas
# =============================================================================


class DocumentOut(BaseModel):
    """A document offered as a mention candidate."""

    id: UUID
    url_id: str
    title: str
    collection_id: UUID | None
    is_owner: bool
    published_at: datetime | None
    archived_at: datetime | None
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserOut(BaseModel):
    """A user offered as a mention candidate.

    email is set only when the actor may read it. language, timezone and
    preferences are set only when the actor may read the user's details.
    Unset fields are omitted from the serialized response.
    """

    id: UUID
    name: str
    avatar_url: str | None
    color: str | None
    role: UserRole
    is_suspended: bool
    created_at: datetime
    last_active_at: datetime | None

    email: str | None = None
    language: str | None = None
    timezone: str | None = None
    preferences: dict[str, Any] | None = None


class GroupOut(BaseModel):
    """A group offered as a mention candidate."""

    id: UUID
    name: str
    description: str | None
    member_count: int
    created_at: datetime
    updated_at: datetime


class CollectionOut(BaseModel):
    """A collection offered as a mention candidate."""

    id: UUID
    name: str
    description: str | None
    color: str | None
    icon: str | None
    permission: CollectionPermission | None
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SuggestionsPagination(BaseModel):
    """Pagination parameters echoed back to the caller."""

    offset: int
    limit: int


class SuggestionsData(BaseModel):
    """Suggestions grouped by entity type."""

    documents: list[DocumentOut] = Field(default_factory=list)
    users: list[UserOut] = Field(default_factory=list)
    groups: list[GroupOut] = Field(default_factory=list)
    collections: list[CollectionOut] = Field(default_factory=list)


class SuggestionsResponse(BaseModel):
    """Envelope returned by POST /suggestions.mention."""

    pagination: SuggestionsPagination
    data: SuggestionsData
