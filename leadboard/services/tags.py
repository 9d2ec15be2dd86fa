from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db import Database, Tag, now_utc
from ..guard import Principal, owned_card_and, owned_tag
from ..schemas import TagCardLink, TagCreate, TagEdit, TagOut
from ..views import tag_out

logger = logging.getLogger(__name__)

STARTER_TAGS = (
    ("ux researcher", "#A78BFA"),
    ("product designer", "#FCA5A5"),
    ("content strategist", "#34D399"),
    ("SEO specialist", "#60A5FA"),
    ("brand strategist", "#FBBF24"),
)


def seed_starter_tags(session: Session, user_id: int) -> list[Tag]:
    tags = [Tag(name=name, color=color, user_id=user_id) for name, color in STARTER_TAGS]
    session.add_all(tags)
    session.flush()
    return tags


class TagService:
    def __init__(self, database: Database) -> None:
        self.db = database

    def create_tag(self, principal: Principal, payload: TagCreate) -> int:
        with self.db.transaction("create tag") as session:
            tag = Tag(name=payload.name.strip(), color=payload.color, user_id=principal.user_id)
            session.add(tag)
            session.flush()
            return tag.id

    def get_tags(self, principal: Principal) -> list[TagOut]:
        with self.db.transaction("get tags") as session:
            tags = session.scalars(
                select(Tag)
                .where(Tag.user_id == principal.user_id, Tag.deleted_at.is_(None))
                .order_by(Tag.id.asc())
            ).all()
            logger.info("tags found: %d", len(tags))
            return [tag_out(t) for t in tags]

    def edit_tag(self, principal: Principal, payload: TagEdit) -> int:
        with self.db.transaction("edit tag") as session:
            tag = owned_tag(session, payload.tag_id, principal)
            tag.name = payload.name.strip()
            if payload.color is not None:
                tag.color = payload.color
            return tag.id

    def delete_tag(self, principal: Principal, tag_id: int) -> None:
        with self.db.transaction("delete tag") as session:
            tag = owned_tag(session, tag_id, principal)
            tag.cards.clear()
            tag.deleted_at = now_utc()

    def add_tag(self, principal: Principal, payload: TagCardLink) -> None:
        """Attach a tag to a card; attaching it twice is a no-op."""
        with self.db.transaction("add tag to card") as session:
            card, tag = owned_card_and(
                session,
                payload.card_id,
                principal,
                lambda: owned_tag(session, payload.tag_id, principal),
            )
            if any(t.id == tag.id for t in card.tags):
                return
            card.tags.append(tag)

    def remove_tag(self, principal: Principal, payload: TagCardLink) -> None:
        with self.db.transaction("remove tag from card") as session:
            card, tag = owned_card_and(
                session,
                payload.card_id,
                principal,
                lambda: owned_tag(session, payload.tag_id, principal),
            )
            if tag in card.tags:
                card.tags.remove(tag)
