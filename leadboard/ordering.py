"""Fractional card ordering.

Cards in a list sort by ``card_order`` ascending. A move writes one row: the
moved card gets the midpoint of its new neighbours (or one step past the end
it is dropped on). Repeated halving eventually makes two neighbours
indistinguishable as floats; when their gap falls to ``EPSILON`` the whole list
is renumbered ``1, 2, ... N`` in its current order before the midpoint is taken.
"""

from __future__ import annotations

import logging
import threading
from contextlib import ExitStack, contextmanager
from typing import Dict, Iterable, Iterator, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import Card, ListModel
from .errors import StorageError, ValidationError
from .guard import Principal, owned_card, owned_list

logger = logging.getLogger(__name__)

EPSILON = 1e-9
STEP = 1.0


def order_between(prev: Optional[float], next_: Optional[float]) -> float:
    """Return the order for a card dropped between ``prev`` and ``next_``.

    Either side may be ``None`` meaning the card goes to that end of the list.
    """
    if prev is not None and next_ is not None:
        return (prev + next_) / 2
    if next_ is not None:
        return next_ - STEP
    if prev is not None:
        return prev + STEP
    return STEP


def gap_exhausted(prev: float, next_: float) -> bool:
    return abs(next_ - prev) <= EPSILON


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.users = 0


class ListLocks:
    """One lock per list id, so order mutations on a list run one at a time.

    Entries are counted by holders and waiters and dropped when the last one
    leaves, so ids that are never used again do not stay in the registry.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: Dict[int, _LockEntry] = {}

    def _checkout(self, list_id: int) -> threading.Lock:
        with self._guard:
            entry = self._locks.get(list_id)
            if entry is None:
                entry = self._locks[list_id] = _LockEntry()
            entry.users += 1
            return entry.lock

    def _checkin(self, list_id: int) -> None:
        with self._guard:
            entry = self._locks[list_id]
            entry.users -= 1
            if entry.users == 0:
                del self._locks[list_id]

    @contextmanager
    def hold(self, *list_ids: int) -> Iterator[None]:
        """Hold the locks of every given list, taken in ascending id order."""
        with ExitStack() as stack:
            for list_id in sorted(set(list_ids)):
                lock = self._checkout(list_id)
                stack.callback(self._checkin, list_id)
                stack.enter_context(lock)
            yield


def live_cards(session: Session, list_id: int) -> list[Card]:
    return list(
        session.scalars(
            select(Card)
            .where(Card.list_id == list_id, Card.deleted_at.is_(None))
            .order_by(Card.card_order.asc(), Card.id.asc())
        )
    )


def rebalance(session: Session, list_id: int) -> list[Card]:
    """Renumber the list's cards 1..N keeping their current relative order."""
    try:
        cards = live_cards(session, list_id)
        for position, card in enumerate(cards, start=1):
            card.card_order = float(position)
        session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to rebalance cards: {exc}") from exc
    logger.info("rebalanced %d cards in list %s", len(cards), list_id)
    return cards


def next_card_order(session: Session, list_id: int) -> float:
    """Highest order currently used in the list, 0 when the list is empty."""
    highest = session.scalar(
        select(func.coalesce(func.max(Card.card_order), 0)).where(
            Card.list_id == list_id, Card.deleted_at.is_(None)
        )
    )
    return float(highest or 0)


def _neighbour(
    session: Session,
    card_id: Optional[int],
    principal: Principal,
    label: str,
    moved_id: int,
    list_id: int,
) -> Optional[Card]:
    if not card_id:
        return None
    card = owned_card(session, card_id, principal, message=f"{label} card not found")
    if card.id == moved_id:
        raise ValidationError(f"{label} card is the card being moved")
    if card.list_id != list_id:
        raise ValidationError(f"{label} card is not in the target list")
    return card


def lock_list_rows(session: Session, list_ids: Iterable[int]) -> None:
    """``SELECT ... FOR UPDATE`` the given list rows in ascending id order."""
    session.scalars(
        select(ListModel.id)
        .where(ListModel.id.in_(sorted(set(list_ids))))
        .order_by(ListModel.id.asc())
        .with_for_update()
    ).all()


def place_card(
    session: Session,
    principal: Principal,
    prev_id: Optional[int],
    curr_id: int,
    next_id: Optional[int],
    list_id: int,
) -> Card:
    """Move ``curr_id`` into ``list_id`` between ``prev_id`` and ``next_id``.

    Ids of ``None`` or ``0`` mean "no neighbour on that side". Everything is
    validated before the first write and the caller owns the transaction, so
    a failure part way through leaves the list untouched. Both the card's
    current list and the target list are row locked for the rest of the
    transaction.
    """
    target = owned_list(session, list_id, principal)
    curr = owned_card(session, curr_id, principal, message="current card not found")
    source_id = curr.list_id
    lock_list_rows(session, (source_id, target.id))
    session.refresh(curr)
    if curr.list_id != source_id or curr.deleted_at is not None:
        raise ValidationError("current card changed while moving, retry the move")

    if prev_id and prev_id == next_id:
        raise ValidationError("previous and next card must be different cards")
    prev = _neighbour(session, prev_id, principal, "previous", curr.id, target.id)
    next_ = _neighbour(session, next_id, principal, "next", curr.id, target.id)

    if prev is not None and next_ is not None and gap_exhausted(prev.card_order, next_.card_order):
        logger.info(
            "order gap between cards %s and %s exhausted, rebalancing list %s",
            prev.id,
            next_.id,
            target.id,
        )
        rebalance(session, target.id)
        session.refresh(prev)
        session.refresh(next_)

    curr.list_id = target.id
    curr.card_order = order_between(
        prev.card_order if prev is not None else None,
        next_.card_order if next_ is not None else None,
    )
    try:
        session.flush()
    except SQLAlchemyError as exc:
        raise StorageError(f"failed to update card: {exc}") from exc
    return curr
