"""Field-level authorization predicates for user records.

These predicates decide which optional fields of another user may be
disclosed to the actor. They are pure functions of (actor, target) and are
kept apart from presentation so redaction can be tested on its own.

Capabilities:
- readEmail: the actor is the target, or the actor administers the target's team
- readDetails: the actor is the target, or the actor is a full member (admin or
  member) of the target's team

Users of another team are never disclosed. Unknown capabilities are denied.
"""

from collections.abc import Callable

from loom.auth.actor import Actor
from loom.db.models import User, UserRole

READ_EMAIL = "readEmail"
READ_DETAILS = "readDetails"


def _same_team(actor: Actor, user: User) -> bool:
    return actor.team_id == user.team_id


def can_read_email(actor: Actor, user: User) -> bool:
    """Check if the actor may see the user's email address."""
    if not _same_team(actor, user):
        return False
    return actor.id == user.id or actor.is_admin


def can_read_details(actor: Actor, user: User) -> bool:
    """Check if the actor may see the user's language, timezone and preferences."""
    if not _same_team(actor, user):
        return False
    return actor.id == user.id or actor.role in (UserRole.admin, UserRole.member)


_CAPABILITIES: dict[str, Callable[[Actor, User], bool]] = {
    READ_EMAIL: can_read_email,
    READ_DETAILS: can_read_details,
}


def authorize(actor: Actor, capability: str, target: User) -> bool:
    """Check a named capability of the actor against a target user.

    Returns False for capabilities that are not defined.
    """
    check = _CAPABILITIES.get(capability)
    if check is None:
        return False
    return check(actor, target)
