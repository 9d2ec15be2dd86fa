from __future__ import annotations

import logging
from datetime import datetime

from sqlalchemy import select, update

from ..db import Activity, Card, Database, FieldDefinition, FieldType, FieldValue, now_utc
from ..errors import ValidationError
from ..guard import Principal, owned_card, owned_list
from ..ordering import ListLocks, next_card_order, place_card
from ..schemas import (
    BulkProspects,
    CardCreate,
    CardDetail,
    CardDetailsUpdate,
    CardMove,
    CardUpdate,
    CompanyOut,
    FieldDetail,
)
from ..views import activity_out, card_out

logger = logging.getLogger(__name__)

MOVE_ATTEMPTS = 3


def soft_delete_card(session, card: Card, when: datetime) -> None:
    """Mark a card deleted along with its notes and field values."""
    card.deleted_at = when
    card.tags.clear()
    session.execute(
        update(Activity)
        .where(Activity.card_id == card.id, Activity.deleted_at.is_(None))
        .values(deleted_at=when)
    )
    session.execute(
        update(FieldValue)
        .where(FieldValue.card_id == card.id, FieldValue.deleted_at.is_(None))
        .values(deleted_at=when)
    )


class CardService:
    def __init__(self, database: Database, locks: ListLocks) -> None:
        self.db = database
        self.locks = locks

    def create_card(self, principal: Principal, payload: CardCreate) -> int:
        with self.locks.hold(payload.list_id), self.db.transaction("create card") as session:
            target = owned_list(session, payload.list_id, principal, lock=True)
            card = Card(
                name=payload.name.strip(),
                designation=payload.designation,
                email=payload.email,
                phone=payload.phone,
                image_url=payload.image_url,
                list_id=target.id,
                card_order=next_card_order(session, target.id) + 1,
            )
            session.add(card)
            session.flush()
            logger.info("created card %s in list %s", card.id, target.id)
            return card.id

    def _card_list_id(self, principal: Principal, card_id: int) -> int:
        with self.db.transaction("load card") as session:
            return owned_card(session, card_id, principal, message="current card not found").list_id

    def move_card(self, principal: Principal, payload: CardMove) -> None:
        """Move a card while holding the locks of both its current and its target list.

        The current list is read before locking; if another move takes the card
        elsewhere in between, the locks are released and the move starts over.
        """
        for _ in range(MOVE_ATTEMPTS):
            source_id = self._card_list_id(principal, payload.curr_card)
            with self.locks.hold(source_id, payload.list_id), self.db.transaction("move card") as session:
                current = owned_card(session, payload.curr_card, principal, message="current card not found")
                if current.list_id != source_id:
                    logger.info("card %s left list %s before the move, retrying", current.id, source_id)
                    continue
                card = place_card(
                    session,
                    principal,
                    payload.prev_card,
                    payload.curr_card,
                    payload.next_card,
                    payload.list_id,
                )
                logger.info("moved card %s to list %s at %s", card.id, card.list_id, card.card_order)
                return
        raise ValidationError("current card changed while moving, retry the move")

    def delete_card(self, principal: Principal, card_id: int) -> int:
        with self.db.transaction("delete card") as session:
            card = owned_card(session, card_id, principal)
            soft_delete_card(session, card, now_utc())
            return card.id

    def update_card(self, principal: Principal, card_id: int, payload: CardUpdate) -> int:
        with self.db.transaction("update card") as session:
            card = owned_card(session, card_id, principal)
            card.name = payload.name.strip()
            card.designation = payload.designation
            card.email = payload.email
            card.phone = payload.phone
            card.image_url = payload.image_url
            return card.id

    def update_card_details(
        self, principal: Principal, card_id: int, payload: CardDetailsUpdate
    ) -> int:
        with self.db.transaction("update card details") as session:
            card = owned_card(session, card_id, principal)
            for name, value in payload.model_dump().items():
                setattr(card, name, value.strip() if name == "name" else value)
            return card.id

    def get_card(self, principal: Principal, card_id: int) -> CardDetail:
        """Card with its list, notes and every custom field the user has defined.

        Fields with a recorded value come first, then the user's remaining
        definitions as empty placeholders, bucketed by contact or company.
        """
        with self.db.transaction("get card") as session:
            card = owned_card(session, card_id, principal)

            activities = session.scalars(
                select(Activity)
                .where(Activity.card_id == card.id, Activity.deleted_at.is_(None))
                .order_by(Activity.created_at.asc(), Activity.id.asc())
            ).all()

            details: dict[FieldType, list[FieldDetail]] = {kind: [] for kind in FieldType}
            values = session.execute(
                select(FieldValue, FieldDefinition)
                .join(FieldDefinition, FieldValue.field_id == FieldDefinition.id)
                .where(
                    FieldValue.card_id == card.id,
                    FieldValue.deleted_at.is_(None),
                    FieldDefinition.deleted_at.is_(None),
                    FieldDefinition.user_id == principal.user_id,
                )
                .order_by(FieldDefinition.id.asc())
            ).all()
            recorded = set()
            for value, definition in values:
                recorded.add(definition.id)
                details[definition.type].append(
                    FieldDetail(
                        id=definition.id,
                        name=definition.name,
                        value=value.value,
                        data_type=definition.data_type,
                    )
                )

            placeholders = session.scalars(
                select(FieldDefinition)
                .where(
                    FieldDefinition.user_id == principal.user_id,
                    FieldDefinition.deleted_at.is_(None),
                    FieldDefinition.id.not_in(sorted(recorded)),
                )
                .order_by(FieldDefinition.id.asc())
            ).all()
            for definition in placeholders:
                details[definition.type].append(
                    FieldDetail(
                        id=definition.id,
                        name=definition.name,
                        value="",
                        data_type=definition.data_type,
                    )
                )

            return CardDetail(
                card=card_out(card),
                profile_url=card.profile_url,
                ai_summary=card.ai_summary,
                location=card.location,
                list_name=card.parent_list.name,
                list_color=card.parent_list.color,
                company=CompanyOut(
                    name=card.company_name,
                    role=card.company_role,
                    location=card.company_location,
                    phone=card.company_phone,
                    email=card.company_email,
                ),
                additional_contact=details[FieldType.CONTACT],
                additional_company=details[FieldType.COMPANY],
                activity=[activity_out(a) for a in activities],
            )

    def bulk_create(self, principal: Principal, payload: BulkProspects) -> list[int]:
        """Append prospects to the end of a list, in the order given."""
        with self.locks.hold(payload.list_id), self.db.transaction("bulk create cards") as session:
            target = owned_list(session, payload.list_id, principal, lock=True)
            base = next_card_order(session, target.id)
            cards = [
                Card(
                    name=p.name.strip(),
                    designation=p.designation,
                    email=p.email,
                    phone=p.phone,
                    image_url=p.image_url,
                    location=p.location,
                    profile_url=p.profile_url,
                    ai_summary=p.ai_summary,
                    list_id=target.id,
                    card_order=base + index,
                )
                for index, p in enumerate(payload.prospects, start=1)
            ]
            session.add_all(cards)
            session.flush()
            logger.info(
                "bulk created %d cards in list %s via key %s",
                len(cards),
                target.id,
                principal.api_key_id,
            )
            return [c.id for c in cards]
