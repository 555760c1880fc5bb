"""Data models for ``finance_tracker``.

Domain values (:class:`Category`, :class:`Transaction`,
:class:`ParsedTransaction`) are frozen dataclasses; edits produce new
instances. The pydantic models at the bottom are the DTOs exchanged with the
persistence collaborator (see :mod:`finance_tracker.persistence`).
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import uuid
from dataclasses import dataclass, field
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

from .money import to_amount

# ---------------------------------------------------------------------------
# Core enums and values
# ---------------------------------------------------------------------------


class TransactionType(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"

    @property
    def label(self) -> str:
        return "收入" if self is TransactionType.INCOME else "支出"


@dataclass(frozen=True, slots=True)
class Category:
    """A transaction category.

    Attributes
    ----------
    id:
        Stable identity. Predefined categories use well-known UUIDs (see
        :mod:`finance_tracker.categories`); custom ones get a fresh ``uuid4``.
    name:
        Display label and lookup key for parsed category names.
    icon:
        Short emoji/string shown next to the name.
    default_type:
        The transaction type the category is meant for.
    is_custom:
        ``True`` for user-created categories (deletable).
    """

    id: uuid.UUID
    name: str
    icon: str
    default_type: TransactionType
    is_custom: bool = False


@dataclass(frozen=True, slots=True)
class Transaction:
    """A single income or expense record.

    ``amount`` is coerced to a positive two-place ``Decimal`` on construction;
    zero, negative, or non-numeric amounts raise ``ValueError`` so an invalid
    transaction can never exist. Only the calendar day of ``date`` matters.
    """

    amount: Decimal
    category: Category
    type: TransactionType
    date: dt.date = field(default_factory=dt.date.today)
    note: str = ""
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_amount(self.amount))
        if isinstance(self.date, dt.datetime):
            object.__setattr__(self, "date", self.date.date())
        object.__setattr__(self, "type", TransactionType(self.type))

    def edited(
        self,
        *,
        amount: Decimal | float | int | str | None = None,
        category: Category | None = None,
        note: str | None = None,
        date: dt.date | None = None,
    ) -> Transaction:
        """Return a copy with the mutable fields replaced; ``id``/``type`` kept."""

        changes: dict[str, object] = {}
        if amount is not None:
            changes["amount"] = amount
        if category is not None:
            changes["category"] = category
        if note is not None:
            changes["note"] = note
        if date is not None:
            changes["date"] = date
        return dataclasses.replace(self, **changes)


@dataclass(frozen=True, slots=True)
class ParsedTransaction:
    """Structured result of parsing a spoken/transcribed sentence.

    ``category`` is a category *name* (or ``None``); callers resolve it to a
    :class:`Category` with :meth:`CategoryCatalog.resolve`.
    """

    amount: Decimal
    category: str | None
    description: str
    type: TransactionType


# ---------------------------------------------------------------------------
# DTOs for the persistence collaborator
# ---------------------------------------------------------------------------


class CategoryRecord(BaseModel):
    model_config = ConfigDict(strict=True, extra="forbid", str_strip_whitespace=True)

    id: uuid.UUID
    name: str
    icon: str
    default_type: TransactionType
    is_custom: bool = True

    @classmethod
    def from_category(cls, category: Category) -> CategoryRecord:
        return cls(
            id=category.id,
            name=category.name,
            icon=category.icon,
            default_type=category.default_type,
            is_custom=category.is_custom,
        )

    def to_category(self) -> Category:
        return Category(
            id=self.id,
            name=self.name,
            icon=self.icon,
            default_type=self.default_type,
            is_custom=self.is_custom,
        )


class TransactionRecord(BaseModel):
    """Flat transaction row; the category is referenced by id plus the name
    and type it had when saved (used to re-map predefined categories)."""

    model_config = ConfigDict(strict=True, extra="forbid")

    id: uuid.UUID
    amount: Decimal
    type: TransactionType
    date: dt.date
    note: str = ""
    category_id: uuid.UUID
    category_name: str = ""
    category_is_custom: bool = False

    @field_validator("amount")
    @classmethod
    def _amount_positive(cls, v: Decimal) -> Decimal:
        return to_amount(v)

    @classmethod
    def from_transaction(cls, tx: Transaction) -> TransactionRecord:
        return cls(
            id=tx.id,
            amount=tx.amount,
            type=tx.type,
            date=tx.date,
            note=tx.note,
            category_id=tx.category.id,
            category_name=tx.category.name,
            category_is_custom=tx.category.is_custom,
        )


class StoreSnapshot(BaseModel):
    """Everything the persistence collaborator saves and loads."""

    model_config = ConfigDict(strict=True, extra="forbid")

    transactions: list[TransactionRecord] = []
    custom_categories: list[CategoryRecord] = []


__all__ = [
    "Category",
    "CategoryRecord",
    "ParsedTransaction",
    "StoreSnapshot",
    "Transaction",
    "TransactionRecord",
    "TransactionType",
]
