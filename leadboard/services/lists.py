from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from ..db import Card, Database, ListModel, now_utc
from ..errors import ValidationError
from ..guard import Principal, owned_list
from ..ordering import ListLocks, live_cards
from ..schemas import ListCreate, ListOut, ListUpdate, ListWithCards
from ..views import card_out, list_out
from .cards import soft_delete_card

logger = logging.getLogger(__name__)

DEFAULT_LISTS = (
    ("New Leads", "#F9BA0B"),
    ("Follow Up", "#40C2FC"),
    ("Qualified", "#75C699"),
    ("Rejected", "#EB695B"),
)


def seed_default_lists(session: Session, user_id: int) -> list[ListModel]:
    lists = [
        ListModel(name=name, color=color, user_id=user_id, list_order=float(position))
        for position, (name, color) in enumerate(DEFAULT_LISTS, start=1)
    ]
    session.add_all(lists)
    session.flush()
    return lists


def _user_lists(session: Session, user_id: int) -> list[ListModel]:
    return list(
        session.scalars(
            select(ListModel)
            .where(ListModel.user_id == user_id, ListModel.deleted_at.is_(None))
            .order_by(ListModel.list_order.asc(), ListModel.id.asc())
        )
    )


class ListService:
    def __init__(self, database: Database, locks: ListLocks) -> None:
        self.db = database
        self.locks = locks

    def create_default_lists(self, principal: Principal) -> list[ListOut]:
        with self.db.transaction("create default lists") as session:
            if _user_lists(session, principal.user_id):
                raise ValidationError("default lists already exist")
            lists = seed_default_lists(session, principal.user_id)
            logger.info("created default lists for user %s", principal.user_id)
            return [list_out(lst) for lst in lists]

    def get_lists(self, principal: Principal) -> list[ListWithCards]:
        with self.db.transaction("get lists") as session:
            result = []
            for lst in _user_lists(session, principal.user_id):
                cards = [card_out(c) for c in live_cards(session, lst.id)]
                result.append(ListWithCards(**list_out(lst).model_dump(), cards=cards))
            return result

    def create_list(self, principal: Principal, payload: ListCreate) -> ListOut:
        with self.db.transaction("create list") as session:
            highest = session.scalar(
                select(func.coalesce(func.max(ListModel.list_order), 0)).where(
                    ListModel.user_id == principal.user_id, ListModel.deleted_at.is_(None)
                )
            )
            lst = ListModel(
                name=payload.name.strip(),
                color=payload.color,
                user_id=principal.user_id,
                list_order=float(highest or 0) + 1,
            )
            session.add(lst)
            session.flush()
            return list_out(lst)

    def update_list(self, principal: Principal, list_id: int, payload: ListUpdate) -> ListOut:
        with self.db.transaction("update list") as session:
            lst = owned_list(session, list_id, principal)
            lst.name = payload.name.strip()
            if payload.color is not None:
                lst.color = payload.color
            session.flush()
            return list_out(lst)

    def delete_list(self, principal: Principal, list_id: int) -> int:
        """Soft delete a list and every card in it."""
        with self.locks.hold(list_id), self.db.transaction("delete list") as session:
            lst = owned_list(session, list_id, principal, lock=True)
            when = now_utc()
            cards = session.scalars(
                select(Card).where(Card.list_id == lst.id, Card.deleted_at.is_(None))
            ).all()
            for card in cards:
                soft_delete_card(session, card, when)
            lst.deleted_at = when
            logger.info("deleted list %s with %d cards", lst.id, len(cards))
            return lst.id
