"""The transaction repository.

:class:`TransactionStore` owns the transaction list and the category catalog
and exposes filtering and aggregation queries. It is an ordinary object that
callers construct and pass around explicitly; there is no module-level
instance.

Mutations are serialized with a re-entrant lock. Queries copy the list under
the lock and aggregate over that immutable snapshot, so readers never observe
a half-applied change. "Not found" conditions are never errors: update and
delete return ``False`` and leave the store untouched.
"""

from __future__ import annotations

import datetime as dt
import threading
import uuid
from collections.abc import Iterable
from decimal import Decimal
from typing import TYPE_CHECKING

from . import reports
from .categories import UNCATEGORIZED, CategoryCatalog, is_predefined
from .filters import FilterType, all_filters
from .logging_setup import get_logger
from .models import (
    Category,
    CategoryRecord,
    StoreSnapshot,
    Transaction,
    TransactionRecord,
    TransactionType,
)

if TYPE_CHECKING:
    from .persistence import StateRepository

_logger = get_logger("finance_tracker.store")

_INCOME = TransactionType.INCOME
_EXPENSE = TransactionType.EXPENSE


class TransactionStore:
    """In-memory transactions plus custom categories.

    Parameters
    ----------
    transactions:
        Initial transactions, kept in the given order.
    catalog:
        Category catalog; a fresh one (predefined categories only) by default.
    repository:
        Optional persistence collaborator used by :meth:`save_all_data`.
    """

    def __init__(
        self,
        transactions: Iterable[Transaction] = (),
        *,
        catalog: CategoryCatalog | None = None,
        repository: StateRepository | None = None,
    ) -> None:
        self._lock = threading.RLock()
        self._transactions: list[Transaction] = list(transactions)
        self.catalog = catalog if catalog is not None else CategoryCatalog()
        self.repository = repository

    # ---- Snapshots / persistence ---------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """Immutable snapshot in insertion order."""
        with self._lock:
            return tuple(self._transactions)

    @property
    def custom_categories(self) -> tuple[Category, ...]:
        with self._lock:
            return self.catalog.custom_categories

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return StoreSnapshot(
                transactions=[TransactionRecord.from_transaction(t) for t in self._transactions],
                custom_categories=[
                    CategoryRecord.from_category(c) for c in self.catalog.custom_categories
                ],
            )

    @classmethod
    def from_snapshot(
        cls, snapshot: StoreSnapshot, *, repository: StateRepository | None = None
    ) -> TransactionStore:
        """Rebuild a store from persisted records.

        Predefined categories saved under an outdated id are re-mapped by
        ``(name, type)``; references that cannot be resolved at all point at
        the "未分类" sentinel of the transaction's type.
        """

        catalog = CategoryCatalog(r.to_category() for r in snapshot.custom_categories)
        txs: list[Transaction] = []
        remapped = 0
        for rec in snapshot.transactions:
            category = catalog.find_by_id(rec.category_id)
            if category is None:
                remapped += 1
                category = UNCATEGORIZED[rec.type]
                if not rec.category_is_custom:
                    for c in catalog.categories_for_type(rec.type):
                        if is_predefined(c) and c.name == rec.category_name:
                            category = c
                            break
            txs.append(
                Transaction(
                    id=rec.id,
                    amount=rec.amount,
                    category=category,
                    type=rec.type,
                    date=rec.date,
                    note=rec.note,
                )
            )
        if remapped:
            _logger.info("store:load remapped_categories=%d", remapped)
        return cls(txs, catalog=catalog, repository=repository)

    @classmethod
    def load(cls, repository: StateRepository) -> TransactionStore:
        store = cls.from_snapshot(repository.load(), repository=repository)
        _logger.info(
            "store:loaded transactions=%d custom_categories=%d",
            len(store._transactions),
            len(store.catalog.custom_categories),
        )
        return store

    def save_all_data(self) -> None:
        """Hand the current state to the persistence collaborator (if any)."""

        if self.repository is None:
            _logger.debug("store:save skipped; no repository configured")
            return
        snap = self.snapshot()
        self.repository.save(snap)
        _logger.info(
            "store:saved transactions=%d custom_categories=%d",
            len(snap.transactions),
            len(snap.custom_categories),
        )

    def clear_all_data(self) -> None:
        with self._lock:
            self._transactions.clear()
            self.catalog = CategoryCatalog()

    # ---- Transaction mutations -----------------------------------------------

    def add_transaction(self, transaction: Transaction) -> None:
        with self._lock:
            self._transactions.append(transaction)
        _logger.debug("tx:add id=%s amount=%s", transaction.id, transaction.amount)

    def update_transaction(self, transaction: Transaction) -> bool:
        """Replace the stored transaction with the same ``id``.

        The stored ``type`` is immutable and is kept even if ``transaction``
        carries a different one. Returns ``False`` when no transaction matches.
        """

        with self._lock:
            for i, existing in enumerate(self._transactions):
                if existing.id != transaction.id:
                    continue
                if transaction.type != existing.type:
                    transaction = Transaction(
                        id=existing.id,
                        amount=transaction.amount,
                        category=transaction.category,
                        type=existing.type,
                        date=transaction.date,
                        note=transaction.note,
                    )
                self._transactions[i] = transaction
                return True
        _logger.debug("tx:update miss id=%s", transaction.id)
        return False

    def delete_transaction(self, transaction: Transaction | uuid.UUID) -> bool:
        tx_id = transaction if isinstance(transaction, uuid.UUID) else transaction.id
        with self._lock:
            before = len(self._transactions)
            self._transactions = [t for t in self._transactions if t.id != tx_id]
            removed = len(self._transactions) != before
        if not removed:
            _logger.debug("tx:delete miss id=%s", tx_id)
        return removed

    def get_transaction(self, tx_id: uuid.UUID) -> Transaction | None:
        with self._lock:
            for t in self._transactions:
                if t.id == tx_id:
                    return t
        return None

    # ---- Category mutations --------------------------------------------------

    def all_categories(self) -> list[Category]:
        with self._lock:
            return self.catalog.all_categories()

    def all_filters(self) -> list[FilterType]:
        return all_filters(self.all_categories())

    def add_custom_category(
        self, name: str, icon: str, default_type: TransactionType
    ) -> Category:
        with self._lock:
            return self.catalog.add_custom_category(name, icon, default_type)

    def delete_category_and_reassign(self, category: Category) -> int:
        """Delete a custom category without deleting its transactions.

        Every transaction that referenced the category is reassigned to the
        "未分类" sentinel of its own type. Predefined categories are ignored.
        Returns the number of reassigned transactions.
        """

        if not category.is_custom or is_predefined(category):
            return 0
        with self._lock:
            self.catalog.remove_category(category)
            reassigned = 0
            for i, t in enumerate(self._transactions):
                if t.category.id == category.id:
                    self._transactions[i] = t.edited(category=UNCATEGORIZED[t.type])
                    reassigned += 1
        _logger.info(
            "category:deleted id=%s name=%s reassigned=%d", category.id, category.name, reassigned
        )
        return reassigned

    # The catalog alone cannot see transactions; removal through the store
    # always applies the reassignment policy.
    remove_category = delete_category_and_reassign

    # ---- Queries -------------------------------------------------------------

    def filter(self, filter_type: FilterType) -> list[Transaction]:
        return [t for t in self.transactions if filter_type.matches(t)]

    def sorted_transactions(self, filter_type: FilterType | None = None) -> list[Transaction]:
        """Newest first (by date; ties keep the later insertion first)."""

        txs = self.transactions if filter_type is None else self.filter(filter_type)
        indexed = list(enumerate(txs))
        indexed.sort(key=lambda p: (p[1].date, p[0]), reverse=True)
        return [t for _i, t in indexed]

    @property
    def total_income(self) -> Decimal:
        return reports.sum_of(self.transactions, _INCOME)

    @property
    def total_expense(self) -> Decimal:
        return reports.sum_of(self.transactions, _EXPENSE)

    @property
    def balance(self) -> Decimal:
        txs = self.transactions
        return reports.sum_of(txs, _INCOME) - reports.sum_of(txs, _EXPENSE)

    def monthly_income(self, reference: dt.date) -> Decimal:
        return reports.monthly_sum(self.transactions, reference, _INCOME)

    def monthly_expense(self, reference: dt.date) -> Decimal:
        return reports.monthly_sum(self.transactions, reference, _EXPENSE)

    def daily_income(self, day: dt.date) -> Decimal:
        return reports.daily_sum(self.transactions, day, _INCOME)

    def daily_expense(self, day: dt.date) -> Decimal:
        return reports.daily_sum(self.transactions, day, _EXPENSE)

    def monthly_category_totals(
        self, reference: dt.date, tx_type: TransactionType
    ) -> dict[Category, Decimal]:
        return reports.category_totals(self.transactions, reference, tx_type)

    @property
    def available_years(self) -> list[int]:
        return sorted({t.date.year for t in self.transactions}, reverse=True)

    def available_months(self, year: int) -> list[int]:
        return sorted({t.date.month for t in self.transactions if t.date.year == year})

    @property
    def available_year_months(self) -> list[tuple[int, int]]:
        return sorted({(t.date.year, t.date.month) for t in self.transactions}, reverse=True)

    def month_over_month(
        self, reference: dt.date, tx_type: TransactionType = _EXPENSE
    ) -> reports.MonthDelta:
        return reports.month_over_month(self.transactions, reference, tx_type)

    def monthly_performance(
        self, reference: dt.date, months: int = 6
    ) -> list[reports.MonthlyPerformance]:
        return reports.monthly_performance(self.transactions, reference, months)

    def category_insights(
        self, reference: dt.date, tx_type: TransactionType = _EXPENSE
    ) -> list[reports.CategoryInsight]:
        return reports.category_insights(self.transactions, reference, tx_type)

    def savings_rate(self, since: dt.date | None = None) -> Decimal:
        txs = [t for t in self.transactions if since is None or t.date >= since]
        return reports.savings_rate(reports.sum_of(txs, _INCOME), reports.sum_of(txs, _EXPENSE))

    def recording_days(self, reference: dt.date, days: int = 30) -> int:
        """Distinct days with at least one record in the ``days`` before ``reference``."""

        start = reference - dt.timedelta(days=days)
        return len({t.date for t in self.transactions if start <= t.date <= reference})


__all__ = ["TransactionStore"]
