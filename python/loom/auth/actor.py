"""Authenticated actor identity.

The actor is resolved once per request by the auth middleware and is
immutable for the rest of the request. It carries everything the read paths
need to decide visibility: team, role and the team's policy preferences.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loom.db.models import Team, TeamPreference, User, UserRole


@dataclass(frozen=True)
class Actor:
    """Authenticated actor identity.

    Attributes:
        id: The actor's user ID (from JWT sub claim).
        team_id: The team the actor belongs to.
        role: The actor's team-level role.
        team_preferences: Snapshot of the team's preferences at request start.
    """

    id: UUID
    team_id: UUID
    role: UserRole
    team_preferences: Mapping[str, Any] = field(default_factory=dict)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    @property
    def is_viewer(self) -> bool:
        return self.role == UserRole.viewer

    @property
    def is_guest(self) -> bool:
        return self.role == UserRole.guest

    def get_preference(self, key: TeamPreference) -> Any:
        """Return the team's value for a preference, or None when unset."""
        return self.team_preferences.get(key.value)


async def load_actor(session: AsyncSession, user_id: UUID) -> Actor | None:
    """Load the actor for an authenticated user ID.

    Returns None when the user does not exist or is suspended; callers
    treat both as unauthenticated.
    """
    result = await session.execute(
        select(User, Team).join(Team, Team.id == User.team_id).where(User.id == user_id)
    )
    row = result.first()
    if row is None:
        return None

    user, team = row
    if user.suspended_at is not None:
        return None

    return Actor(
        id=user.id,
        team_id=user.team_id,
        role=user.role,
        team_preferences=dict(team.preferences or {}),
    )
