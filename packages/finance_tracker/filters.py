"""Transaction filters as a closed union of frozen dataclasses.

Every variant exposes ``matches(transaction)`` and ``display_name``; the
predicate itself is :func:`matches`, one exhaustive ``match`` over the union.
Filters only select transactions; aggregation lives in the store.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import assert_never

from .models import Category, Transaction, TransactionType

# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


class _FilterBase:
    __slots__ = ()

    def matches(self, transaction: Transaction) -> bool:
        return matches(self, transaction)  # type: ignore[arg-type]

    @property
    def display_name(self) -> str:
        return display_name(self)  # type: ignore[arg-type]


@dataclass(frozen=True, slots=True)
class All(_FilterBase):
    pass


@dataclass(frozen=True, slots=True)
class ByTransactionType(_FilterBase):
    type: TransactionType


@dataclass(frozen=True, slots=True)
class ByCategory(_FilterBase):
    category: Category


@dataclass(frozen=True, slots=True)
class ByYear(_FilterBase):
    year: int


@dataclass(frozen=True, slots=True)
class ByMonth(_FilterBase):
    year: int
    month: int


@dataclass(frozen=True, slots=True)
class ByYearAndTransactionType(_FilterBase):
    year: int
    type: TransactionType


@dataclass(frozen=True, slots=True)
class ByMonthAndTransactionType(_FilterBase):
    year: int
    month: int
    type: TransactionType


@dataclass(frozen=True, slots=True)
class ByYearAndCategory(_FilterBase):
    year: int
    category: Category


@dataclass(frozen=True, slots=True)
class ByMonthAndCategory(_FilterBase):
    year: int
    month: int
    category: Category


type FilterType = (
    All
    | ByTransactionType
    | ByCategory
    | ByYear
    | ByMonth
    | ByYearAndTransactionType
    | ByMonthAndTransactionType
    | ByYearAndCategory
    | ByMonthAndCategory
)


# ---------------------------------------------------------------------------
# Predicate and labels
# ---------------------------------------------------------------------------


def matches(flt: FilterType, tx: Transaction) -> bool:
    """Return whether ``tx`` is selected by ``flt``.

    Categories compare by id so a renamed or re-created instance with the same
    identity still matches.
    """

    year, month = tx.date.year, tx.date.month
    match flt:
        case All():
            return True
        case ByTransactionType(type=t):
            return tx.type == t
        case ByCategory(category=c):
            return tx.category.id == c.id
        case ByYear(year=y):
            return year == y
        case ByMonth(year=y, month=m):
            return year == y and month == m
        case ByYearAndTransactionType(year=y, type=t):
            return year == y and tx.type == t
        case ByMonthAndTransactionType(year=y, month=m, type=t):
            return year == y and month == m and tx.type == t
        case ByYearAndCategory(year=y, category=c):
            return year == y and tx.category.id == c.id
        case ByMonthAndCategory(year=y, month=m, category=c):
            return year == y and month == m and tx.category.id == c.id
        case _:
            assert_never(flt)


def display_name(flt: FilterType) -> str:
    match flt:
        case All():
            return "全部"
        case ByTransactionType(type=t):
            return t.label
        case ByCategory(category=c):
            return c.name
        case ByYear(year=y):
            return f"{y}年"
        case ByMonth(year=y, month=m):
            return f"{y}年{m}月"
        case ByYearAndTransactionType(year=y, type=t):
            return f"{y}年 - {t.label}"
        case ByMonthAndTransactionType(year=y, month=m, type=t):
            return f"{y}年{m}月 - {t.label}"
        case ByYearAndCategory(year=y, category=c):
            return f"{y}年 - {c.name}"
        case ByMonthAndCategory(year=y, month=m, category=c):
            return f"{y}年{m}月 - {c.name}"
        case _:
            assert_never(flt)


def build_filter(
    *,
    year: int | None = None,
    month: int | None = None,
    tx_type: TransactionType | None = None,
    category: Category | None = None,
) -> FilterType:
    """Pick the variant matching the given combination of criteria.

    Raises
    ------
    ValueError
        For combinations no variant expresses: ``month`` without ``year``,
        both ``tx_type`` and ``category``, or a month outside 1..12.
    """

    if month is not None and year is None:
        raise ValueError("month requires year")
    if month is not None and not 1 <= month <= 12:
        raise ValueError(f"invalid month: {month}")
    if tx_type is not None and category is not None:
        raise ValueError("filter by either type or category, not both")

    if year is None:
        if tx_type is not None:
            return ByTransactionType(tx_type)
        if category is not None:
            return ByCategory(category)
        return All()
    if month is None:
        if tx_type is not None:
            return ByYearAndTransactionType(year, tx_type)
        if category is not None:
            return ByYearAndCategory(year, category)
        return ByYear(year)
    if tx_type is not None:
        return ByMonthAndTransactionType(year, month, tx_type)
    if category is not None:
        return ByMonthAndCategory(year, month, category)
    return ByMonth(year, month)


def predefined_filters() -> list[FilterType]:
    return [
        All(),
        ByTransactionType(TransactionType.INCOME),
        ByTransactionType(TransactionType.EXPENSE),
    ]


def category_filters(categories: Iterable[Category]) -> list[FilterType]:
    return [ByCategory(c) for c in categories]


def all_filters(categories: Iterable[Category]) -> list[FilterType]:
    return predefined_filters() + category_filters(categories)


__all__ = [
    "All",
    "ByCategory",
    "ByMonth",
    "ByMonthAndCategory",
    "ByMonthAndTransactionType",
    "ByTransactionType",
    "ByYear",
    "ByYearAndCategory",
    "ByYearAndTransactionType",
    "FilterType",
    "all_filters",
    "build_filter",
    "category_filters",
    "display_name",
    "matches",
    "predefined_filters",
]
