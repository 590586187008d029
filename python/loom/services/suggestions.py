"""Mention suggestion service.

Answers POST /suggestions.mention: given a free-text query, returns
documents, users, groups and collections the actor may mention.

Pipeline:
1. resolve_scope: decide whether directory isolation applies to the actor
2. build_predicates: per-entity filter clauses consistent with that scope
3. execute_lookups: four concurrent lookups joined at a barrier
4. assemble: presentation and per-field redaction of users

Directory isolation applies only to viewers and guests of a team that has
the restrictExternalDirectory preference enabled. Isolated actors see
themselves, members of their own groups, and their own groups. An isolated
actor with no groups sees only themselves and no groups at all.

Scope clauses are always appended to the base predicate; no clause is ever
replaced by another.
"""

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar
from uuid import UUID

from sqlalchemy import ColumnElement, false, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from loom.auth.actor import Actor
from loom.auth.permissions import READ_DETAILS, READ_EMAIL, authorize
from loom.db.models import Document, Group, StatusFilter, TeamPreference, User
from loom.db.session import SessionFactory
from loom.errors import LookupFailedError
from loom.logging import get_logger
from loom.schemas.suggestions import (
    CollectionOut,
    SuggestionsData,
    SuggestionsPagination,
    SuggestionsResponse,
)
from loom.services import directory, search
from loom.services.fanout import join_all
from loom.services.presenters import present_document, present_group, present_user
from loom.services.redact import hash_text, safe_kv

logger = get_logger(__name__)

T = TypeVar("T")

# =============================================================================
# Types
# =============================================================================


@dataclass(frozen=True)
class ScopeDecision:
    """Visibility scope of one request.

    Attributes:
        restricted: Whether directory isolation applies.
        allowed_group_ids: The actor's groups when restricted, otherwise empty.
    """

    restricted: bool
    allowed_group_ids: frozenset[UUID] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Predicates:
    """Filter clauses for the user and group lookups, combined with AND."""

    user: tuple[ColumnElement[bool], ...]
    group: tuple[ColumnElement[bool], ...]


@dataclass(frozen=True)
class LookupResults:
    documents: list[Document]
    users: list[User]
    groups: list[Group]
    collections: list[CollectionOut]


# =============================================================================
# Lookup Guard
# =============================================================================


async def _guarded(lookup: str, call: Callable[[], Awaitable[T]]) -> T:
    """Run a store call, translating database failures into LookupFailedError."""
    try:
        return await call()
    except SQLAlchemyError as e:
        logger.error(
            "suggestion_lookup_failed",
            lookup=lookup,
            error_type=type(e).__name__,
        )
        raise LookupFailedError(lookup) from e


# =============================================================================
# Scope Resolution
# =============================================================================


def is_isolation_candidate(actor: Actor) -> bool:
    """Check whether the actor's role and team policy call for isolation."""
    if not (actor.is_viewer or actor.is_guest):
        return False
    return bool(actor.get_preference(TeamPreference.restrict_external_directory))


async def resolve_scope(session: AsyncSession, actor: Actor) -> ScopeDecision:
    """Decide the visibility scope of the actor.

    Performs one group membership lookup when isolation applies and no
    lookups otherwise.

    Raises:
        LookupFailedError: If the membership lookup fails.
    """
    if not is_isolation_candidate(actor):
        return ScopeDecision(restricted=False)

    group_ids = await _guarded("scope", lambda: directory.group_ids_of(session, actor.id))
    return ScopeDecision(restricted=True, allowed_group_ids=frozenset(group_ids))


# =============================================================================
# Predicate Building
# =============================================================================


def build_predicates(
    scope: ScopeDecision, team_id: UUID, actor_id: UUID, query: str | None
) -> Predicates:
    """Build the user and group filter clauses for a request.

    Pure: no I/O is performed. Membership is expressed as a subquery.
    """
    user_clauses: list[ColumnElement[bool]] = [
        User.team_id == team_id,
        User.suspended_at.is_(None),
    ]
    group_clauses: list[ColumnElement[bool]] = [
        Group.team_id == team_id,
        Group.disable_mentions == false(),
    ]

    query = search.normalize_query(query)
    if query is not None:
        user_clauses.append(
            or_(search.text_match(User.name, query), search.text_match(User.email, query))
        )
        group_clauses.append(search.text_match(Group.name, query))

    if scope.restricted:
        if scope.allowed_group_ids:
            user_clauses.append(
                or_(
                    User.id.in_(directory.members_of(scope.allowed_group_ids)),
                    User.id == actor_id,
                )
            )
            group_clauses.append(Group.id.in_(list(scope.allowed_group_ids)))
        else:
            # Isolated actor without groups: self only, no groups
            user_clauses.append(User.id == actor_id)
            group_clauses.append(false())

    return Predicates(user=tuple(user_clauses), group=tuple(group_clauses))


# =============================================================================
# Fan-out
# =============================================================================


async def execute_lookups(
    session_factory: SessionFactory,
    actor: Actor,
    query: str | None,
    offset: int,
    limit: int,
    predicates: Predicates,
) -> LookupResults:
    """Run the document, user, group and collection lookups concurrently.

    Each lookup opens its own session. If any lookup fails the others are
    cancelled and the failure propagates; partial results are never returned.

    Raises:
        LookupFailedError: If any lookup fails.
    """

    async def documents() -> list[Document]:
        async with session_factory() as session:
            return await search.search_titles_for_user(
                session,
                actor,
                query=query,
                offset=offset,
                limit=limit,
                status_filter=[StatusFilter.published],
            )

    async def users() -> list[User]:
        stmt = (
            select(User)
            .where(*predicates.user)
            .order_by(User.name.asc(), User.id.asc())
            .offset(offset)
            .limit(limit)
        )
        async with session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def groups() -> list[Group]:
        stmt = (
            select(Group)
            .where(*predicates.group)
            .order_by(Group.name.asc(), Group.id.asc())
            .offset(offset)
            .limit(limit)
        )
        async with session_factory() as session:
            result = await session.execute(stmt)
            return list(result.scalars().all())

    async def collections() -> list[CollectionOut]:
        async with session_factory() as session:
            return await search.search_collections_for_user(
                session, actor, query=query, offset=offset, limit=limit
            )

    found_documents, found_users, found_groups, found_collections = await join_all(
        _guarded("documents", documents),
        _guarded("users", users),
        _guarded("groups", groups),
        _guarded("collections", collections),
    )
    return LookupResults(
        documents=found_documents,
        users=found_users,
        groups=found_groups,
        collections=found_collections,
    )


# =============================================================================
# Assembly
# =============================================================================


async def assemble(
    session_factory: SessionFactory,
    actor: Actor,
    results: LookupResults,
    offset: int,
    limit: int,
) -> SuggestionsResponse:
    """Present lookup results, redacting user fields per actor.

    Order within each entity type is preserved. Pagination is echoed as given.
    """
    documents = [present_document(document, actor) for document in results.documents]

    users = [
        present_user(
            user,
            include_email=authorize(actor, READ_EMAIL, user),
            include_details=authorize(actor, READ_DETAILS, user),
        )
        for user in results.users
    ]

    groups = await join_all(
        *(
            _guarded("group_members", lambda group=group: present_group(session_factory, group))
            for group in results.groups
        )
    )

    return SuggestionsResponse(
        pagination=SuggestionsPagination(offset=offset, limit=limit),
        data=SuggestionsData(
            documents=documents,
            users=users,
            groups=groups,
            collections=list(results.collections),
        ),
    )


# =============================================================================
# Entry Point
# =============================================================================


async def suggest_mentions(
    session_factory: SessionFactory,
    actor: Actor,
    query: str | None,
    offset: int,
    limit: int,
) -> SuggestionsResponse:
    """Return mention suggestions for the actor.

    Args:
        session_factory: Factory for per-lookup database sessions.
        actor: The authenticated actor.
        query: Optional free-text filter.
        offset: Number of results to skip per entity type.
        limit: Maximum number of results per entity type.

    Returns:
        SuggestionsResponse with pagination echoed and results per type.

    Raises:
        LookupFailedError: If the scope lookup or any search lookup fails.
    """
    start_time = time.monotonic()

    async with session_factory() as session:
        scope = await resolve_scope(session, actor)

    predicates = build_predicates(scope, actor.team_id, actor.id, query)
    results = await execute_lookups(session_factory, actor, query, offset, limit, predicates)
    response = await assemble(session_factory, actor, results, offset, limit)

    log_fields: dict[str, Any] = {
        "query_len": len(query or ""),
        "restricted": scope.restricted,
        "documents_count": len(response.data.documents),
        "users_count": len(response.data.users),
        "groups_count": len(response.data.groups),
        "collections_count": len(response.data.collections),
        "latency_ms": round((time.monotonic() - start_time) * 1000, 2),
    }
    if query:
        log_fields["query_hash"] = hash_text(query)
    logger.info("suggestions_served", **safe_kv(**log_fields))

    return response
