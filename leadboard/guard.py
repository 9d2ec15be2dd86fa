"""Ownership checks run before any mutation.

Every check reloads the row and compares its owning user with the acting
principal. A row that does not exist and a row that belongs to another user
raise the same ``NotFoundError`` so callers cannot probe for foreign ids.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.orm import Session, contains_eager

from .db import Activity, Card, FieldDefinition, ListModel, Tag
from .errors import NotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Principal:
    """The identity a request acts for.

    ``api_key_id`` is set when the caller authenticated with an API key; the
    key's bound user is then the ``user_id``.
    """

    user_id: int
    api_key_id: Optional[int] = None


def owned_list(
    session: Session,
    list_id: Optional[int],
    principal: Principal,
    message: str = "list not found",
    lock: bool = False,
) -> ListModel:
    stmt = select(ListModel).where(
        ListModel.id == (list_id or 0),
        ListModel.user_id == principal.user_id,
        ListModel.deleted_at.is_(None),
    )
    if lock:
        stmt = stmt.with_for_update()
    found = session.scalars(stmt).first()
    if found is None:
        logger.warning("list %s not found for user %s", list_id, principal.user_id)
        raise NotFoundError(message)
    return found


def owned_card(
    session: Session,
    card_id: Optional[int],
    principal: Principal,
    message: str = "card not found",
) -> Card:
    stmt = (
        select(Card)
        .join(Card.parent_list)
        .options(contains_eager(Card.parent_list))
        .where(
            Card.id == (card_id or 0),
            Card.deleted_at.is_(None),
            ListModel.deleted_at.is_(None),
            ListModel.user_id == principal.user_id,
        )
    )
    found = session.scalars(stmt).first()
    if found is None:
        logger.warning("card %s not found for user %s", card_id, principal.user_id)
        raise NotFoundError(message)
    return found


def owned_tag(
    session: Session,
    tag_id: Optional[int],
    principal: Principal,
    message: str = "tag not found",
) -> Tag:
    found = session.scalars(
        select(Tag).where(
            Tag.id == (tag_id or 0),
            Tag.user_id == principal.user_id,
            Tag.deleted_at.is_(None),
        )
    ).first()
    if found is None:
        logger.warning("tag %s not found for user %s", tag_id, principal.user_id)
        raise NotFoundError(message)
    return found


def owned_field_definition(
    session: Session,
    field_id: Optional[int],
    principal: Principal,
    message: str = "field definition not found",
) -> FieldDefinition:
    found = session.scalars(
        select(FieldDefinition).where(
            FieldDefinition.id == (field_id or 0),
            FieldDefinition.user_id == principal.user_id,
            FieldDefinition.deleted_at.is_(None),
        )
    ).first()
    if found is None:
        logger.warning("field definition %s not found for user %s", field_id, principal.user_id)
        raise NotFoundError(message)
    return found


def owned_activity(
    session: Session,
    activity_id: Optional[int],
    principal: Principal,
    message: str = "activity not found",
) -> Activity:
    stmt = (
        select(Activity)
        .join(Activity.card)
        .join(Card.parent_list)
        .where(
            Activity.id == (activity_id or 0),
            Activity.deleted_at.is_(None),
            Card.deleted_at.is_(None),
            ListModel.deleted_at.is_(None),
            ListModel.user_id == principal.user_id,
        )
    )
    found = session.scalars(stmt).first()
    if found is None:
        logger.warning("activity %s not found for user %s", activity_id, principal.user_id)
        raise NotFoundError(message)
    return found


def owned_card_and(
    session: Session,
    card_id: Optional[int],
    principal: Principal,
    load_other: Callable[[], T],
) -> tuple[Card, T]:
    """Fetch a card and one more owned record, then validate both together.

    Both lookups are attempted before anything is raised; the card error wins
    when both fail. Nothing is written here, so a failure leaves no trace.
    """
    card: Card | None = None
    other: T | None = None
    errors: list[NotFoundError] = []
    try:
        card = owned_card(session, card_id, principal)
    except NotFoundError as exc:
        errors.append(exc)
    try:
        other = load_other()
    except NotFoundError as exc:
        errors.append(exc)
    if errors:
        raise errors[0]
    return card, other  # type: ignore[return-value]
