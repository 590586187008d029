"""Suggestion routes.

Routes are transport-only:
- Extract the actor from request.state
- Call exactly one service function
- Return the serialized response or raise ApiError

No domain logic or raw DB access in routes.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from loom.api.deps import SessionFactory, get_actor, get_session_factory
from loom.auth.actor import Actor
from loom.schemas.suggestions import SuggestionsMentionRequest
from loom.services import suggestions as suggestions_service

router = APIRouter()


@router.post("/suggestions.mention")
async def suggestions_mention(
    body: SuggestionsMentionRequest,
    actor: Annotated[Actor, Depends(get_actor)],
    session_factory: Annotated[SessionFactory, Depends(get_session_factory)],
) -> dict:
    """Suggest documents, users, groups and collections to mention.

    Results are scoped to the actor's team. Viewers and guests of a team
    that restricts its external directory only see their own groups and the
    members of those groups.

    User emails and profile details are omitted unless the actor may read them.
    """
    result = await suggestions_service.suggest_mentions(
        session_factory,
        actor,
        query=body.query,
        offset=body.offset,
        limit=body.limit,
    )
    return result.model_dump(mode="json", exclude_unset=True)
