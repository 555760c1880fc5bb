"""Category catalog: predefined, custom and sentinel categories.

Predefined categories are fixed for the lifetime of the process and carry
stable, well-known UUIDs so that persisted references keep resolving across
versions. Custom categories are created and removed explicitly by the user.

When a transaction references a category that no longer exists (a custom
category was deleted, or a persisted id cannot be resolved), it is pointed at
the "未分类" sentinel of its own transaction type. Sentinels are not part of
:meth:`CategoryCatalog.all_categories` and cannot be deleted.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable

from .logging_setup import get_logger
from .models import Category, TransactionType

_logger = get_logger("finance_tracker.categories")

# ---------------------------
# Predefined categories
# ---------------------------


def _predefined(uid: str, name: str, icon: str, default_type: TransactionType) -> Category:
    return Category(id=uuid.UUID(uid), name=name, icon=icon, default_type=default_type)


_E = TransactionType.EXPENSE
_I = TransactionType.INCOME

FOOD = _predefined("11111111-1111-1111-1111-111111111111", "餐饮", "🍽️", _E)
TRANSPORT = _predefined("22222222-2222-2222-2222-222222222222", "交通", "🚗", _E)
SHOPPING = _predefined("33333333-3333-3333-3333-333333333333", "购物", "🛍️", _E)
ENTERTAINMENT = _predefined("44444444-4444-4444-4444-444444444444", "娱乐", "🎬", _E)
HEALTHCARE = _predefined("55555555-5555-5555-5555-555555555555", "医疗", "🏥", _E)
EDUCATION = _predefined("66666666-6666-6666-6666-666666666666", "教育", "📚", _E)
HOUSING = _predefined("77777777-7777-7777-7777-777777777777", "住房", "🏠", _E)
SALARY = _predefined("88888888-8888-8888-8888-888888888888", "工资", "💼", _I)
BONUS = _predefined("99999999-9999-9999-9999-999999999999", "奖金", "🎁", _I)
INVESTMENT = _predefined("aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa", "投资", "📈", _I)
OTHER = _predefined("bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb", "其他", "📝", _E)

PREDEFINED_CATEGORIES: tuple[Category, ...] = (
    FOOD,
    TRANSPORT,
    SHOPPING,
    ENTERTAINMENT,
    HEALTHCARE,
    EDUCATION,
    HOUSING,
    SALARY,
    BONUS,
    INVESTMENT,
    OTHER,
)

UNCATEGORIZED_NAME = "未分类"

UNCATEGORIZED: dict[TransactionType, Category] = {
    _E: _predefined("eeeeeeee-0000-0000-0000-000000000001", UNCATEGORIZED_NAME, "❔", _E),
    _I: _predefined("eeeeeeee-0000-0000-0000-000000000002", UNCATEGORIZED_NAME, "❔", _I),
}

_PREDEFINED_BY_ID = {c.id: c for c in PREDEFINED_CATEGORIES}
_SENTINEL_IDS = frozenset(c.id for c in UNCATEGORIZED.values())


def is_predefined(category: Category) -> bool:
    return category.id in _PREDEFINED_BY_ID


def is_sentinel(category: Category) -> bool:
    return category.id in _SENTINEL_IDS


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``."""

    return " ".join(name.strip().split())


# ---------------------------
# Catalog
# ---------------------------


class CategoryCatalog:
    """Predefined categories followed by user-defined ones.

    Duplicate custom names are allowed; identity is always the ``id``.
    """

    def __init__(self, custom_categories: Iterable[Category] = ()) -> None:
        self._custom: list[Category] = []
        for c in custom_categories:
            if is_predefined(c) or is_sentinel(c):
                continue
            self._custom.append(c if c.is_custom else _as_custom(c))

    @property
    def custom_categories(self) -> tuple[Category, ...]:
        return tuple(self._custom)

    def all_categories(self) -> list[Category]:
        return [*PREDEFINED_CATEGORIES, *self._custom]

    def categories_for_type(self, tx_type: TransactionType) -> list[Category]:
        """Categories the UI offers for ``tx_type`` (custom ones by their default type)."""
        return [c for c in self.all_categories() if c.default_type == tx_type]

    def add_custom_category(
        self, name: str, icon: str, default_type: TransactionType
    ) -> Category:
        category = Category(
            id=uuid.uuid4(),
            name=normalize_name(name),
            icon=icon.strip(),
            default_type=TransactionType(default_type),
            is_custom=True,
        )
        self._custom.append(category)
        _logger.debug("category:add id=%s name=%s", category.id, category.name)
        return category

    def remove_category(self, category: Category) -> bool:
        """Remove a custom category; predefined or unknown ones are a no-op."""

        if not category.is_custom or is_predefined(category):
            return False
        before = len(self._custom)
        self._custom = [c for c in self._custom if c.id != category.id]
        removed = len(self._custom) != before
        if removed:
            _logger.debug("category:remove id=%s name=%s", category.id, category.name)
        return removed

    def find_by_id(self, category_id: uuid.UUID) -> Category | None:
        if category_id in _PREDEFINED_BY_ID:
            return _PREDEFINED_BY_ID[category_id]
        for c in self._custom:
            if c.id == category_id:
                return c
        for c in UNCATEGORIZED.values():
            if c.id == category_id:
                return c
        return None

    def category_for_id(self, category_id: uuid.UUID, tx_type: TransactionType) -> Category:
        """Return the category with ``category_id`` or the sentinel for ``tx_type``."""

        found = self.find_by_id(category_id)
        if found is None:
            return UNCATEGORIZED[TransactionType(tx_type)]
        return found

    def default_category(self, tx_type: TransactionType) -> Category:
        """First predefined category of ``tx_type``."""
        for c in PREDEFINED_CATEGORIES:
            if c.default_type == tx_type:
                return c
        return UNCATEGORIZED[TransactionType(tx_type)]

    def resolve(self, name: str | None, tx_type: TransactionType) -> Category:
        """Map a parsed category name onto a concrete category.

        The first category whose name matches and whose default type equals
        ``tx_type`` (or which is custom) wins. Without a match, the first
        predefined category of ``tx_type`` is returned.
        """

        if name:
            wanted = normalize_name(name)
            for c in self.all_categories():
                if c.name == wanted and (c.default_type == tx_type or c.is_custom):
                    return c
        return self.default_category(tx_type)

    def canonicalize(self, category: Category) -> Category:
        """Map a non-custom category onto the canonical predefined instance.

        Older data may carry predefined categories under a different id; they
        are matched by ``(name, default_type)``. Anything else is returned
        unchanged.
        """

        if category.is_custom or is_sentinel(category):
            return category
        for c in PREDEFINED_CATEGORIES:
            if c.name == category.name and c.default_type == category.default_type:
                return c
        return category


def _as_custom(category: Category) -> Category:
    return Category(
        id=category.id,
        name=category.name,
        icon=category.icon,
        default_type=category.default_type,
        is_custom=True,
    )


__all__ = [
    "BONUS",
    "CategoryCatalog",
    "EDUCATION",
    "ENTERTAINMENT",
    "FOOD",
    "HEALTHCARE",
    "HOUSING",
    "INVESTMENT",
    "OTHER",
    "PREDEFINED_CATEGORIES",
    "SALARY",
    "SHOPPING",
    "TRANSPORT",
    "UNCATEGORIZED",
    "UNCATEGORIZED_NAME",
    "is_predefined",
    "is_sentinel",
    "normalize_name",
]
