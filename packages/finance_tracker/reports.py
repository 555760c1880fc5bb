"""Pure aggregation helpers over sequences of transactions.

Everything here takes an already-materialized sequence (the store passes an
immutable snapshot) and returns new values; nothing mutates its input.
Months are calendar months, never rolling 30-day windows.
"""

from __future__ import annotations

import calendar
import datetime as dt
import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from decimal import Decimal
from typing import NamedTuple

from .models import Category, Transaction, TransactionType
from .money import ZERO, format_currency, quantize, total

# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------


def same_month(a: dt.date, b: dt.date) -> bool:
    return a.year == b.year and a.month == b.month


def add_months(d: dt.date, n: int) -> dt.date:
    """Add ``n`` months to ``d``, clamping the day to the target month's end."""

    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return d.replace(year=year, month=month, day=day)


def month_key(d: dt.date) -> str:
    return f"{d.year:04d}-{d.month:02d}"


# ---------------------------------------------------------------------------
# Sums
# ---------------------------------------------------------------------------


def sum_of(transactions: Iterable[Transaction], tx_type: TransactionType) -> Decimal:
    return total(t.amount for t in transactions if t.type == tx_type)


def monthly_sum(
    transactions: Iterable[Transaction], reference: dt.date, tx_type: TransactionType
) -> Decimal:
    return total(
        t.amount for t in transactions if t.type == tx_type and same_month(t.date, reference)
    )


def daily_sum(
    transactions: Iterable[Transaction], day: dt.date, tx_type: TransactionType
) -> Decimal:
    return total(t.amount for t in transactions if t.type == tx_type and t.date == day)


def category_totals(
    transactions: Iterable[Transaction], reference: dt.date, tx_type: TransactionType
) -> dict[Category, Decimal]:
    """Map each category to its summed amount for ``tx_type`` in the month of ``reference``."""

    out: dict[Category, Decimal] = {}
    for t in transactions:
        if t.type != tx_type or not same_month(t.date, reference):
            continue
        out[t.category] = out.get(t.category, ZERO) + t.amount
    return {c: quantize(v) for c, v in out.items()}


def savings_rate(income: Decimal, expense: Decimal) -> Decimal:
    """Percentage of income kept; ``0`` when there is no income."""

    if income <= 0:
        return ZERO
    return quantize((income - expense) / income * 100)


# ---------------------------------------------------------------------------
# Month-over-month and performance
# ---------------------------------------------------------------------------


class MonthDelta(NamedTuple):
    current: Decimal
    previous: Decimal
    change: Decimal
    # ``None`` when the previous month had nothing to compare against.
    change_pct: Decimal | None


def month_over_month(
    transactions: Sequence[Transaction], reference: dt.date, tx_type: TransactionType
) -> MonthDelta:
    current = monthly_sum(transactions, reference, tx_type)
    previous = monthly_sum(transactions, add_months(reference, -1), tx_type)
    change = current - previous
    pct = quantize(change / previous * 100) if previous > 0 else None
    return MonthDelta(current, previous, change, pct)


@dataclass(frozen=True, slots=True)
class MonthlyPerformance:
    month: dt.date  # first day of the month
    income: Decimal
    expense: Decimal
    savings: Decimal
    savings_rate: Decimal


def monthly_performance(
    transactions: Sequence[Transaction], reference: dt.date, months: int = 6
) -> list[MonthlyPerformance]:
    """Income/expense/savings for the ``months`` calendar months ending at ``reference``.

    Returned oldest first. ``months`` must be positive.
    """

    if months <= 0:
        raise ValueError("months must be a positive integer")
    start = reference.replace(day=1)
    out: list[MonthlyPerformance] = []
    for i in range(months - 1, -1, -1):
        m = add_months(start, -i)
        income = monthly_sum(transactions, m, TransactionType.INCOME)
        expense = monthly_sum(transactions, m, TransactionType.EXPENSE)
        out.append(
            MonthlyPerformance(
                month=m,
                income=income,
                expense=expense,
                savings=income - expense,
                savings_rate=savings_rate(income, expense),
            )
        )
    return out


@dataclass(frozen=True, slots=True)
class CategoryInsight:
    category: Category
    amount: Decimal
    # Share of the month's total for the type, in percent.
    percentage: Decimal
    # Difference against the same category in the previous month.
    change: Decimal


def category_insights(
    transactions: Sequence[Transaction], reference: dt.date, tx_type: TransactionType
) -> list[CategoryInsight]:
    current = category_totals(transactions, reference, tx_type)
    previous = category_totals(transactions, add_months(reference, -1), tx_type)
    month_total = total(current.values())
    insights = [
        CategoryInsight(
            category=c,
            amount=amt,
            percentage=quantize(amt / month_total * 100) if month_total > 0 else ZERO,
            change=amt - previous.get(c, ZERO),
        )
        for c, amt in current.items()
    ]
    # Largest first; ties by name for stable output
    insights.sort(key=lambda i: (-i.amount, i.category.name))
    return insights


# ---------------------------------------------------------------------------
# Trend table
# ---------------------------------------------------------------------------


def _display_width(s: str) -> int:
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in s)


def _pad(s: str, width: int, *, right: bool) -> str:
    fill = " " * max(0, width - _display_width(s))
    return fill + s if right else s + fill


def report_trends(
    transactions: Iterable[Transaction],
    tx_type: TransactionType = TransactionType.EXPENSE,
) -> str:
    """Render totals by category by month as a plain-text table.

    Columns are calendar months (oldest first) plus an overall total; rows are
    categories ordered by overall total (largest first) plus a totals row.
    Returns an empty string when there is nothing to report.
    """

    cells: dict[tuple[str, str], Decimal] = {}
    months: set[str] = set()
    for t in transactions:
        if t.type != tx_type:
            continue
        key = (t.category.name, month_key(t.date))
        cells[key] = cells.get(key, ZERO) + t.amount
        months.add(key[1])
    if not cells:
        return ""

    cols = sorted(months)
    row_totals: dict[str, Decimal] = {}
    for (name, _m), amt in cells.items():
        row_totals[name] = row_totals.get(name, ZERO) + amt
    names = sorted(row_totals, key=lambda n: (-row_totals[n], n))

    header = ["分类", *cols, "合计"]
    body: list[list[str]] = []
    for name in names:
        row = [name]
        row.extend(format_currency(cells.get((name, m), ZERO)) for m in cols)
        row.append(format_currency(row_totals[name]))
        body.append(row)
    footer = ["合计"]
    footer.extend(
        format_currency(total(cells.get((n, m), ZERO) for n in names)) for m in cols
    )
    footer.append(format_currency(total(row_totals.values())))

    table = [header, *body, footer]
    widths = [max(_display_width(r[i]) for r in table) for i in range(len(header))]
    lines = []
    for r_idx, row in enumerate(table):
        parts = [_pad(cell, widths[i], right=i > 0) for i, cell in enumerate(row)]
        lines.append("  ".join(parts).rstrip())
        if r_idx == 0 or r_idx == len(table) - 2:
            lines.append("  ".join("-" * w for w in widths))
    return "\n".join(lines)


__all__ = [
    "CategoryInsight",
    "MonthDelta",
    "MonthlyPerformance",
    "add_months",
    "category_insights",
    "category_totals",
    "daily_sum",
    "month_key",
    "month_over_month",
    "monthly_performance",
    "monthly_sum",
    "report_trends",
    "same_month",
    "savings_rate",
    "sum_of",
]
