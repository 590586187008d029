"""Presentation of ORM rows as API response models.

Presenters never make authorization decisions. Callers decide which optional
fields an actor may see and pass the outcome in as flags.
"""

from sqlalchemy import func, select

from loom.auth.actor import Actor
from loom.db.models import Collection, Document, Group, GroupUser, User
from loom.db.session import SessionFactory
from loom.schemas.suggestions import CollectionOut, DocumentOut, GroupOut, UserOut


def present_document(document: Document, actor: Actor) -> DocumentOut:
    return DocumentOut(
        id=document.id,
        url_id=document.url_id,
        title=document.title,
        collection_id=document.collection_id,
        is_owner=document.created_by_id == actor.id,
        published_at=document.published_at,
        archived_at=document.archived_at,
        updated_at=document.updated_at,
    )


def present_user(user: User, *, include_email: bool, include_details: bool) -> UserOut:
    """Present a user, disclosing optional fields only when requested.

    Fields that are not included are left unset so they are omitted from the
    response entirely, rather than serialized as null.
    """
    fields = {
        "id": user.id,
        "name": user.name,
        "avatar_url": user.avatar_url,
        "color": user.color,
        "role": user.role,
        "is_suspended": user.suspended_at is not None,
        "created_at": user.created_at,
        "last_active_at": user.last_active_at,
    }
    if include_email:
        fields["email"] = user.email
    if include_details:
        fields["language"] = user.language
        fields["timezone"] = user.timezone
        fields["preferences"] = user.preferences or {}
    return UserOut(**fields)


async def present_group(session_factory: SessionFactory, group: Group) -> GroupOut:
    """Present a group with its member count.

    Opens its own session so that several groups can be presented concurrently.
    """
    async with session_factory() as session:
        member_count = await session.scalar(
            select(func.count()).select_from(GroupUser).where(GroupUser.group_id == group.id)
        )
    return GroupOut(
        id=group.id,
        name=group.name,
        description=group.description,
        member_count=member_count or 0,
        created_at=group.created_at,
        updated_at=group.updated_at,
    )


def present_collection(collection: Collection) -> CollectionOut:
    return CollectionOut.model_validate(collection)
