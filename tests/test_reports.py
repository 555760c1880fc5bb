from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from finance_tracker import reports
from finance_tracker.categories import FOOD, SALARY, SHOPPING, TRANSPORT
from finance_tracker.ingest.sample_data import sample_transactions
from finance_tracker.models import Transaction, TransactionType
from finance_tracker.money import format_currency, format_signed
from finance_tracker.store import TransactionStore

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME


def _tx(amount: str, category, tx_type, day: dt.date) -> Transaction:
    return Transaction(amount=amount, category=category, type=tx_type, date=day)


@pytest.mark.parametrize(
    ("start", "n", "expected"),
    [
        (dt.date(2025, 1, 31), 1, dt.date(2025, 2, 28)),
        (dt.date(2024, 1, 31), 1, dt.date(2024, 2, 29)),
        (dt.date(2025, 3, 15), -3, dt.date(2024, 12, 15)),
        (dt.date(2025, 12, 1), 1, dt.date(2026, 1, 1)),
    ],
)
def test_add_months_clamps_day(start: dt.date, n: int, expected: dt.date):
    assert reports.add_months(start, n) == expected


def test_format_helpers():
    assert format_currency(Decimal("1234.5")) == "¥1,234.50"
    assert format_signed(Decimal("-12")) == "-¥12.00"
    assert format_signed(Decimal("0")) == "+¥0.00"


def test_monthly_performance_is_oldest_first_and_covers_empty_months():
    txs = [
        _tx("1000", SALARY, INCOME, dt.date(2025, 9, 1)),
        _tx("250", FOOD, EXPENSE, dt.date(2025, 9, 3)),
        _tx("300", FOOD, EXPENSE, dt.date(2025, 7, 3)),
    ]
    perf = reports.monthly_performance(txs, dt.date(2025, 9, 15), months=3)
    assert [p.month for p in perf] == [
        dt.date(2025, 7, 1),
        dt.date(2025, 8, 1),
        dt.date(2025, 9, 1),
    ]
    assert perf[0].savings == Decimal("-300.00")
    assert perf[0].savings_rate == Decimal("0.00")
    assert perf[1].income == perf[1].expense == Decimal("0.00")
    assert perf[2].savings_rate == Decimal("75.00")


def test_monthly_performance_rejects_non_positive_window():
    with pytest.raises(ValueError):
        reports.monthly_performance([], dt.date(2025, 9, 1), months=0)


def test_category_insights_sorted_with_share_and_change():
    txs = [
        _tx("60", FOOD, EXPENSE, dt.date(2025, 9, 1)),
        _tx("140", TRANSPORT, EXPENSE, dt.date(2025, 9, 2)),
        _tx("100", FOOD, EXPENSE, dt.date(2025, 8, 2)),
    ]
    insights = reports.category_insights(txs, dt.date(2025, 9, 30), EXPENSE)
    assert [i.category for i in insights] == [TRANSPORT, FOOD]
    assert insights[0].percentage == Decimal("70.00")
    assert insights[1].percentage == Decimal("30.00")
    assert insights[1].change == Decimal("-40.00")
    assert insights[0].change == Decimal("140.00")


def test_report_trends_table():
    txs = [
        _tx("60", FOOD, EXPENSE, dt.date(2025, 8, 1)),
        _tx("40", FOOD, EXPENSE, dt.date(2025, 9, 1)),
        _tx("299", SHOPPING, EXPENSE, dt.date(2025, 9, 5)),
        _tx("5000", SALARY, INCOME, dt.date(2025, 9, 1)),
    ]
    table = reports.report_trends(txs, EXPENSE)
    lines = table.splitlines()
    assert lines[0].split() == ["分类", "2025-08", "2025-09", "合计"]
    # Largest category first, totals row last.
    assert lines[2].split() == ["购物", "¥0.00", "¥299.00", "¥299.00"]
    assert lines[3].split() == ["餐饮", "¥60.00", "¥40.00", "¥100.00"]
    assert lines[-1].split() == ["合计", "¥60.00", "¥339.00", "¥399.00"]
    assert "工资" not in table


def test_report_trends_empty():
    assert reports.report_trends([], EXPENSE) == ""


def test_sample_data_spans_current_and_previous_month():
    today = dt.date(2025, 3, 3)
    store = TransactionStore(sample_transactions(today))
    assert len(store.transactions) == 18
    assert store.available_year_months == [(2025, 3), (2025, 2)]
    assert store.monthly_income(today) == Decimal("8500.00")
    assert store.monthly_expense(today) == Decimal("2992.50")
    assert store.monthly_income(dt.date(2025, 2, 1)) == Decimal("7100.00")
