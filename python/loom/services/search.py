"""Title search over documents and collections.

Visibility is enforced inside SQL, never as a post-filter:
- Collections: same team, not archived or deleted, and either shared with
  the team (non-null permission, actor not a guest) or explicitly granted to
  the actor through a CollectionUser row
- Documents: same team, not deleted, and in a collection the actor can read

Text matching is case-insensitive and accent-insensitive substring matching.
Both the column and the LIKE pattern go through lower(unaccent(...)) in SQL,
so the database folds both sides the same way. LIKE wildcards in the query
are escaped so they only ever match themselves.
"""

from collections.abc import Iterable

from sqlalchemy import ColumnElement, String, and_, exists, func, literal, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from loom.auth.actor import Actor
from loom.db.models import Collection, CollectionUser, Document, StatusFilter
from loom.schemas.suggestions import CollectionOut
from loom.services.presenters import present_collection

LIKE_ESCAPE = "\\"

# =============================================================================
# Text Matching
# =============================================================================


def escape_like(value: str) -> str:
    """Escape LIKE wildcards and the escape character itself."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def normalize_query(query: str | None) -> str | None:
    """Return the query unchanged, or None when it is empty.

    Whitespace is part of the query: "john " does not match "Johnson".
    """
    return query or None


def text_match(column, query: str) -> ColumnElement[bool]:
    """Case and accent insensitive substring match of a column against a query."""
    pattern = literal(f"%{escape_like(query)}%", String)
    return func.lower(func.unaccent(column)).like(
        func.lower(func.unaccent(pattern)), escape=LIKE_ESCAPE
    )


# =============================================================================
# Visibility
# =============================================================================


def readable_collection_clause(actor: Actor) -> ColumnElement[bool]:
    """Clause selecting the collections the actor can read."""
    membership = exists().where(
        CollectionUser.collection_id == Collection.id,
        CollectionUser.user_id == actor.id,
    )
    if actor.is_guest:
        shared = membership
    else:
        shared = or_(Collection.permission.is_not(None), membership)
    return and_(
        Collection.team_id == actor.team_id,
        Collection.deleted_at.is_(None),
        shared,
    )


def _status_clause(status: StatusFilter) -> ColumnElement[bool]:
    if status == StatusFilter.published:
        return and_(Document.published_at.is_not(None), Document.archived_at.is_(None))
    if status == StatusFilter.draft:
        return and_(Document.published_at.is_(None), Document.archived_at.is_(None))
    return Document.archived_at.is_not(None)


# =============================================================================
# Search
# =============================================================================


async def search_titles_for_user(
    session: AsyncSession,
    actor: Actor,
    *,
    query: str | None,
    offset: int,
    limit: int,
    status_filter: Iterable[StatusFilter] = (StatusFilter.published,),
) -> list[Document]:
    """Search document titles visible to the actor.

    Args:
        session: Database session.
        actor: The requesting actor.
        query: Optional text filter; blank means no filter.
        offset: Number of rows to skip.
        limit: Maximum number of rows to return.
        status_filter: Lifecycle states to include; a document matches if it
            is in any of them.

    Returns:
        Documents ordered by most recently updated first.
    """
    readable = select(Collection.id).where(
        readable_collection_clause(actor), Collection.archived_at.is_(None)
    )
    clauses = [
        Document.team_id == actor.team_id,
        Document.deleted_at.is_(None),
        Document.collection_id.in_(readable),
    ]

    statuses = list(status_filter)
    if statuses:
        clauses.append(or_(*(_status_clause(status) for status in statuses)))

    query = normalize_query(query)
    if query is not None:
        clauses.append(text_match(Document.title, query))

    stmt = (
        select(Document)
        .where(*clauses)
        .order_by(Document.updated_at.desc(), Document.id)
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def search_collections_for_user(
    session: AsyncSession,
    actor: Actor,
    *,
    query: str | None,
    offset: int,
    limit: int,
) -> list[CollectionOut]:
    """Search collection names visible to the actor.

    Archived collections are excluded. Results are ordered by name.
    """
    clauses = [readable_collection_clause(actor), Collection.archived_at.is_(None)]

    query = normalize_query(query)
    if query is not None:
        clauses.append(text_match(Collection.name, query))

    stmt = (
        select(Collection)
        .where(*clauses)
        .order_by(Collection.name.asc(), Collection.id)
        .offset(offset)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return [present_collection(collection) for collection in result.scalars().all()]
