"""Pydantic schemas for request/response models.

All schemas are re-exported here for convenient imports.
"""

from loom.schemas.suggestions import (
    CollectionOut,
    DocumentOut,
    GroupOut,
    SuggestionsData,
    SuggestionsMentionRequest,
    SuggestionsPagination,
    SuggestionsResponse,
    UserOut,
)

__all__ = [
    "CollectionOut",
    "DocumentOut",
    "GroupOut",
    "SuggestionsData",
    "SuggestionsMentionRequest",
    "SuggestionsPagination",
    "SuggestionsResponse",
    "UserOut",
]
