from __future__ import annotations

# Seeder for a fresh ledger: two months of representative transactions
# (current and previous month) so summaries and month-over-month views have
# something to show.
#
# Usage (example):
#   python -m finance_tracker.ingest.sample_data --database-url sqlite+pysqlite:///ledger.db
#
# Dates are relative to ``today`` and clamp to the current month's first day
# so every "current month" row really lands in the current month.
import argparse
import datetime as dt

from ..categories import (
    BONUS,
    ENTERTAINMENT,
    FOOD,
    HEALTHCARE,
    HOUSING,
    INVESTMENT,
    OTHER,
    SALARY,
    SHOPPING,
    TRANSPORT,
)
from ..models import Category, Transaction, TransactionType
from ..reports import add_months

_I = TransactionType.INCOME
_E = TransactionType.EXPENSE

# (amount, category, type, days back, note)
_CURRENT_MONTH: tuple[tuple[str, Category, TransactionType, int, str], ...] = (
    ("5000", SALARY, _I, 1, "月薪"),
    ("1000", BONUS, _I, 5, "绩效奖金"),
    ("2500", INVESTMENT, _I, 10, "股票收益"),
    ("800", OTHER, _E, 15, "其他购买"),
    ("35.5", FOOD, _E, 1, "午餐"),
    ("120", TRANSPORT, _E, 2, "打车费"),
    ("299", SHOPPING, _E, 3, "购买衣服"),
    ("88", ENTERTAINMENT, _E, 7, "电影票"),
    ("450", HEALTHCARE, _E, 12, "体检费用"),
    ("1200", HOUSING, _E, 20, "房租"),
)

_PREVIOUS_MONTH: tuple[tuple[str, Category, TransactionType, int, str], ...] = (
    ("4800", SALARY, _I, 5, "上月月薪"),
    ("800", BONUS, _I, 10, "上月奖金"),
    ("1500", INVESTMENT, _I, 15, "上月投资收益"),
    ("42.8", FOOD, _E, 3, "上月餐饮"),
    ("95", TRANSPORT, _E, 6, "上月交通"),
    ("350", SHOPPING, _E, 8, "上月购物"),
    ("120", ENTERTAINMENT, _E, 12, "上月娱乐"),
    ("1200", HOUSING, _E, 25, "上月房租"),
)


def _rows_for(
    rows: tuple[tuple[str, Category, TransactionType, int, str], ...], anchor: dt.date
) -> list[Transaction]:
    first = anchor.replace(day=1)
    return [
        Transaction(
            amount=amount,
            category=category,
            type=tx_type,
            date=max(first, anchor - dt.timedelta(days=days_back)),
            note=note,
        )
        for amount, category, tx_type, days_back, note in rows
    ]


def sample_transactions(today: dt.date | None = None) -> list[Transaction]:
    """Return the sample ledger relative to ``today`` (defaults to the real today)."""

    anchor = today or dt.date.today()
    previous = add_months(anchor, -1)
    # Anchor the previous month at its last day so "days back" stays inside it.
    previous_end = add_months(previous.replace(day=1), 1) - dt.timedelta(days=1)
    return [*_rows_for(_CURRENT_MONTH, anchor), *_rows_for(_PREVIOUS_MONTH, previous_end)]


def main(argv: list[str] | None = None) -> int:
    from ..persistence import SqlStateRepository
    from ..store import TransactionStore

    ap = argparse.ArgumentParser(description="Seed the ledger with sample transactions")
    ap.add_argument(
        "--database-url",
        required=False,
        default=None,
        help="SQLAlchemy database URL; falls back to $DATABASE_URL when not set",
    )
    args = ap.parse_args(argv)

    repo = SqlStateRepository(database_url=args.database_url or None)
    store = TransactionStore.load(repo)
    for tx in sample_transactions():
        store.add_transaction(tx)
    store.save_all_data()
    return 0


if __name__ == "__main__":  # pragma: no cover - manual utility
    raise SystemExit(main())
