"""Mapping from ORM rows to response models."""

from .db import Activity, Card, ListModel, Tag, User
from .schemas import ActivityOut, CardOut, ListOut, TagOut, UserOut


def tag_out(tag: Tag) -> TagOut:
    return TagOut(id=tag.id, name=tag.name, color=tag.color)


def card_out(card: Card) -> CardOut:
    tags = [tag_out(t) for t in card.tags if t.deleted_at is None]
    return CardOut(
        id=card.id,
        name=card.name,
        designation=card.designation,
        email=card.email,
        phone=card.phone,
        image_url=card.image_url,
        list_id=card.list_id,
        card_order=card.card_order,
        tags=tags,
    )


def list_out(lst: ListModel) -> ListOut:
    return ListOut(
        id=lst.id,
        name=lst.name,
        color=lst.color,
        list_order=lst.list_order,
        created_at=lst.created_at,
        updated_at=lst.updated_at,
    )


def activity_out(activity: Activity) -> ActivityOut:
    return ActivityOut(id=activity.id, content=activity.content, created_at=activity.created_at)


def user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        name=user.name,
        email=user.email,
        profile_picture=user.profile_picture,
    )
