"""Directory lookups: group membership of users.

Provides:
- group_ids_of: the groups a user belongs to
- members_of: a selectable of user ids belonging to any of a set of groups

members_of returns a SELECT rather than executing it, so callers can embed
it as a subquery in a larger predicate without an extra round trip.
"""

from collections.abc import Iterable
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from loom.db.models import GroupUser


async def group_ids_of(session: AsyncSession, actor_id: UUID) -> frozenset[UUID]:
    """Return the ids of every group the user is a member of."""
    result = await session.execute(select(GroupUser.group_id).where(GroupUser.user_id == actor_id))
    return frozenset(result.scalars().all())


def members_of(group_ids: Iterable[UUID]) -> Select:
    """Select the distinct user ids that belong to any of the given groups."""
    return (
        select(GroupUser.user_id)
        .where(GroupUser.group_id.in_(list(group_ids)))
        .distinct()
    )
