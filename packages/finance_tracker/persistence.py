"""Save/load collaborator for the transaction store.

The store only knows the :class:`StateRepository` protocol: ``load()`` returns
a :class:`~finance_tracker.models.StoreSnapshot` and ``save(snapshot)``
replaces whatever was stored before. :class:`SqlStateRepository` keeps the
snapshot in the shared database owned by ``libs/db``; tables are created on
first use.
"""

from __future__ import annotations

import uuid
from decimal import Decimal
from typing import Protocol

from db import Base
from db.client import get_engine, session_scope
from db.models.ledger import LedgerCategory, LedgerTransaction
from sqlalchemy import delete, select

from .logging_setup import get_logger
from .models import CategoryRecord, StoreSnapshot, TransactionRecord, TransactionType

_logger = get_logger("finance_tracker.persistence")

_MINOR_UNITS = Decimal(100)


class StateRepository(Protocol):
    def load(self) -> StoreSnapshot: ...

    def save(self, snapshot: StoreSnapshot) -> None: ...


class InMemoryStateRepository:
    """Keeps the last saved snapshot in memory (useful for embedding and tests)."""

    def __init__(self, snapshot: StoreSnapshot | None = None) -> None:
        self._snapshot = snapshot if snapshot is not None else StoreSnapshot()

    def load(self) -> StoreSnapshot:
        return self._snapshot.model_copy(deep=True)

    def save(self, snapshot: StoreSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)


# ---------------------------------------------------------------------------
# SQL-backed repository
# ---------------------------------------------------------------------------


def _to_minor(amount: Decimal) -> int:
    return int((amount * _MINOR_UNITS).to_integral_value())


def _from_minor(minor: int) -> Decimal:
    return (Decimal(minor) / _MINOR_UNITS).quantize(Decimal("0.01"))


class SqlStateRepository:
    """Persist the full snapshot into ``ledger_categories``/``ledger_transactions``.

    ``save`` rewrites both tables inside one session scope, so a failure
    leaves the previously saved state intact.
    """

    def __init__(self, *, database_url: str | None = None) -> None:
        self._database_url = database_url
        Base.metadata.create_all(bind=get_engine(database_url=database_url))

    def load(self) -> StoreSnapshot:
        with session_scope(database_url=self._database_url) as session:
            cat_rows = session.scalars(
                select(LedgerCategory).order_by(LedgerCategory.position)
            ).all()
            tx_rows = session.scalars(
                select(LedgerTransaction).order_by(LedgerTransaction.position)
            ).all()
            categories = [
                CategoryRecord(
                    id=uuid.UUID(r.id),
                    name=r.name,
                    icon=r.icon,
                    default_type=TransactionType(r.default_type),
                    is_custom=bool(r.is_custom),
                )
                for r in cat_rows
            ]
            transactions = [
                TransactionRecord(
                    id=uuid.UUID(r.id),
                    amount=_from_minor(r.amount_minor),
                    type=TransactionType(r.type),
                    date=r.date,
                    note=r.note or "",
                    category_id=uuid.UUID(r.category_id),
                    category_name=r.category_name or "",
                    category_is_custom=bool(r.category_is_custom),
                )
                for r in tx_rows
            ]
        _logger.debug(
            "persistence:load transactions=%d custom_categories=%d",
            len(transactions),
            len(categories),
        )
        return StoreSnapshot(transactions=transactions, custom_categories=categories)

    def save(self, snapshot: StoreSnapshot) -> None:
        with session_scope(database_url=self._database_url) as session:
            session.execute(delete(LedgerTransaction))
            session.execute(delete(LedgerCategory))
            session.add_all(
                LedgerCategory(
                    id=str(c.id),
                    position=pos,
                    name=c.name,
                    icon=c.icon,
                    default_type=c.default_type.value,
                    is_custom=c.is_custom,
                )
                for pos, c in enumerate(snapshot.custom_categories)
            )
            session.add_all(
                LedgerTransaction(
                    id=str(t.id),
                    position=pos,
                    amount_minor=_to_minor(t.amount),
                    type=t.type.value,
                    date=t.date,
                    note=t.note,
                    category_id=str(t.category_id),
                    category_name=t.category_name,
                    category_is_custom=t.category_is_custom,
                )
                for pos, t in enumerate(snapshot.transactions)
            )
        _logger.debug(
            "persistence:save transactions=%d custom_categories=%d",
            len(snapshot.transactions),
            len(snapshot.custom_categories),
        )


__all__ = ["InMemoryStateRepository", "SqlStateRepository", "StateRepository"]
