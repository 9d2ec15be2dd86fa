from __future__ import annotations

import logging

from sqlalchemy import select

from ..db import Database, FieldDefinition, FieldType, FieldValue
from ..errors import ValidationError
from ..guard import Principal, owned_card_and, owned_field_definition
from ..schemas import FieldCreate, FieldValueIn, FieldWithSample

logger = logging.getLogger(__name__)


def parse_field_type(raw: str) -> FieldType:
    try:
        return FieldType(raw)
    except ValueError:
        logger.warning("invalid field type %r", raw)
        raise ValidationError(
            "field type must be one of " + ", ".join(t.value for t in FieldType)
        ) from None


class FieldService:
    def __init__(self, database: Database) -> None:
        self.db = database

    def create_field(self, principal: Principal, payload: FieldCreate) -> int:
        kind = parse_field_type(payload.type)
        name = payload.field_name.strip()
        with self.db.transaction("create field definition") as session:
            existing = session.scalars(
                select(FieldDefinition).where(
                    FieldDefinition.name == name,
                    FieldDefinition.user_id == principal.user_id,
                    FieldDefinition.type == kind,
                    FieldDefinition.deleted_at.is_(None),
                )
            ).first()
            if existing is not None:
                raise ValidationError("field definition already exists")
            definition = FieldDefinition(
                name=name,
                data_type=payload.data_type,
                user_id=principal.user_id,
                type=kind,
            )
            session.add(definition)
            session.flush()
            return definition.id

    def insert_field_value(self, principal: Principal, payload: FieldValueIn) -> int:
        """Record a card's value for a field, replacing any earlier value."""
        with self.db.transaction("save field value") as session:
            card, definition = owned_card_and(
                session,
                payload.card_id,
                principal,
                lambda: owned_field_definition(session, payload.field_id, principal),
            )
            value = session.scalars(
                select(FieldValue).where(
                    FieldValue.card_id == card.id, FieldValue.field_id == definition.id
                )
            ).first()
            if value is None:
                value = FieldValue(card_id=card.id, field_id=definition.id)
                session.add(value)
            value.value = payload.value
            value.deleted_at = None
            session.flush()
            return value.id

    def get_fields(self, principal: Principal) -> list[FieldWithSample]:
        with self.db.transaction("get fields") as session:
            sample = (
                select(FieldValue.value)
                .where(FieldValue.field_id == FieldDefinition.id, FieldValue.deleted_at.is_(None))
                .order_by(FieldValue.id.asc())
                .limit(1)
                .scalar_subquery()
            )
            rows = session.execute(
                select(FieldDefinition, sample)
                .where(
                    FieldDefinition.user_id == principal.user_id,
                    FieldDefinition.deleted_at.is_(None),
                )
                .order_by(FieldDefinition.id.asc())
            ).all()
            return [
                FieldWithSample(
                    id=definition.id,
                    name=definition.name,
                    type=definition.type.value,
                    data_type=definition.data_type,
                    sample_value=sample_value,
                )
                for definition, sample_value in rows
            ]
