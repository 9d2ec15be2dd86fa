from __future__ import annotations

import enum
import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Iterator

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    Session,
    mapped_column,
    relationship,
    sessionmaker,
)
from sqlalchemy.pool import StaticPool

from .config import Settings
from .errors import StorageError

logger = logging.getLogger(__name__)


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


class Base(DeclarativeBase):
    pass


class FieldType(str, enum.Enum):
    CONTACT = "CONTACT"
    COMPANY = "COMPANY"


class Timestamped:
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=now_utc, onupdate=now_utc)
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)


card_tags = Table(
    "card_tags",
    Base.metadata,
    Column("card_id", Integer, ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class User(Timestamped, Base):
    __tablename__ = "users"
    name: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(320), unique=True, index=True)
    profile_picture: Mapped[str] = mapped_column(Text, default="")

    lists: Mapped[list[ListModel]] = relationship(back_populates="user")


class ListModel(Timestamped, Base):
    __tablename__ = "lists"
    name: Mapped[str] = mapped_column(String(140))
    color: Mapped[str] = mapped_column(String(16), default="")
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    list_order: Mapped[float] = mapped_column(Float, default=0, index=True)

    user: Mapped[User] = relationship(back_populates="lists")
    cards: Mapped[list[Card]] = relationship(back_populates="parent_list")


class Card(Timestamped, Base):
    __tablename__ = "cards"
    name: Mapped[str] = mapped_column(String(200), index=True, default="")
    designation: Mapped[str] = mapped_column(String(200), default="")
    email: Mapped[str] = mapped_column(String(320), index=True, default="")
    phone: Mapped[str] = mapped_column(String(64), default="")
    image_url: Mapped[str] = mapped_column(Text, default="")
    location: Mapped[str] = mapped_column(String(200), default="")
    profile_url: Mapped[str] = mapped_column(Text, default="")
    ai_summary: Mapped[str] = mapped_column(Text, default="")
    company_name: Mapped[str] = mapped_column(String(200), default="")
    company_role: Mapped[str] = mapped_column(String(200), default="")
    company_location: Mapped[str] = mapped_column(String(200), default="")
    company_phone: Mapped[str] = mapped_column(String(64), default="")
    company_email: Mapped[str] = mapped_column(String(320), default="")
    list_id: Mapped[int] = mapped_column(ForeignKey("lists.id", ondelete="CASCADE"), index=True)
    card_order: Mapped[float] = mapped_column(Float, default=0, index=True)

    parent_list: Mapped[ListModel] = relationship(back_populates="cards")
    tags: Mapped[list[Tag]] = relationship(secondary=card_tags, back_populates="cards")
    activities: Mapped[list[Activity]] = relationship(back_populates="card")
    field_values: Mapped[list[FieldValue]] = relationship(back_populates="card")


class Tag(Timestamped, Base):
    __tablename__ = "tags"
    name: Mapped[str] = mapped_column(String(80))
    color: Mapped[str] = mapped_column(String(16), default="")
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)

    cards: Mapped[list[Card]] = relationship(secondary=card_tags, back_populates="tags")


class FieldDefinition(Timestamped, Base):
    __tablename__ = "field_definitions"
    name: Mapped[str] = mapped_column(String(140))
    data_type: Mapped[str] = mapped_column(String(32), default="string")
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    type: Mapped[FieldType] = mapped_column(Enum(FieldType, native_enum=False, length=20))


class FieldValue(Timestamped, Base):
    __tablename__ = "field_values"
    card_id: Mapped[int] = mapped_column(ForeignKey("cards.id", ondelete="CASCADE"), index=True)
    field_id: Mapped[int] = mapped_column(ForeignKey("field_definitions.id", ondelete="CASCADE"), index=True)
    value: Mapped[str] = mapped_column(Text, default="")

    card: Mapped[Card] = relationship(back_populates="field_values")
    definition: Mapped[FieldDefinition] = relationship()

    __table_args__ = (
        UniqueConstraint("card_id", "field_id", name="uq_field_value"),
    )


class Activity(Timestamped, Base):
    __tablename__ = "activities"
    content: Mapped[str] = mapped_column(Text)
    card_id: Mapped[int] = mapped_column(ForeignKey("cards.id", ondelete="CASCADE"), index=True)

    card: Mapped[Card] = relationship(back_populates="activities")


class APIKey(Timestamped, Base):
    __tablename__ = "api_keys"
    name: Mapped[str] = mapped_column(String(64))
    value: Mapped[str] = mapped_column(Text)  # AES-CFB ciphertext, hex
    hash: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)


class Database:
    """Engine and session factory for one configured database."""

    def __init__(self, settings: Settings) -> None:
        url = settings.database_url
        if url.startswith("sqlite"):
            kwargs: dict = {
                "connect_args": {
                    "check_same_thread": False,
                    "timeout": settings.db_timeout_seconds,
                }
            }
            if ":memory:" in url or url in ("sqlite://", "sqlite+pysqlite://"):
                kwargs["poolclass"] = StaticPool
        else:
            kwargs = {"pool_pre_ping": True, "pool_timeout": settings.db_timeout_seconds}
        self.engine = create_engine(url, **kwargs)
        self.sessionmaker = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def init_db(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def transaction(self, action: str) -> Iterator[Session]:
        """One session and one commit per logical operation.

        Any exception rolls everything back; driver errors are re-raised as
        ``StorageError("failed to <action>: ...")``.
        """
        session = self.sessionmaker()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.exception("failed to %s", action)
            raise StorageError(f"failed to {action}: {exc}") from exc
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()
