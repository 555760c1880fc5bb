from __future__ import annotations

import datetime as dt
from decimal import Decimal

from typer.testing import CliRunner

from finance_tracker.categories import UNCATEGORIZED
from finance_tracker.cli import app
from finance_tracker.models import TransactionType
from finance_tracker.persistence import SqlStateRepository
from finance_tracker.store import TransactionStore

runner = CliRunner()


# ---- Helpers -----------------------------------------------------------------


def _invoke(*args: str, input: str | None = None):
    return runner.invoke(app, list(args), input=input)


def _load() -> TransactionStore:
    return TransactionStore.load(SqlStateRepository())


# ---- Commands ----------------------------------------------------------------


def test_add_then_list_and_summary():
    r = _invoke("add", "35.5", "--category", "餐饮", "--note", "午餐", "--date", "2025-09-10")
    assert r.exit_code == 0, r.output
    r = _invoke(
        "add", "5000", "--type", "income", "--category", "工资", "--date", "2025-09-01"
    )
    assert r.exit_code == 0, r.output

    r = _invoke("list", "--year", "2025", "--month", "9", "--type", "expense")
    assert r.exit_code == 0, r.output
    assert "[2025年9月 - 支出] 1 transaction(s)" in r.output
    assert "午餐" in r.output
    assert "-¥35.50" in r.output

    r = _invoke("summary", "--month", "2025-09")
    assert r.exit_code == 0, r.output
    assert "收入: ¥5,000.00" in r.output
    assert "支出: ¥35.50" in r.output
    assert "结余: +¥4,964.50" in r.output


def test_add_rejects_invalid_amount():
    r = _invoke("add", "abc")
    assert r.exit_code == 1
    assert _load().transactions == ()


def test_edit_keeps_type_and_delete_by_prefix():
    _invoke("add", "20", "--category", "餐饮", "--date", "2025-09-10")
    tx = _load().transactions[0]
    prefix = str(tx.id)[:8]

    r = _invoke("edit", prefix, "--amount", "25", "--category", "交通", "--note", "地铁")
    assert r.exit_code == 0, r.output
    edited = _load().transactions[0]
    assert edited.id == tx.id
    assert edited.amount == Decimal("25.00")
    assert edited.category.name == "交通"
    assert edited.type is TransactionType.EXPENSE

    r = _invoke("delete", prefix)
    assert r.exit_code == 0, r.output
    assert _load().transactions == ()

    r = _invoke("delete", prefix)
    assert r.exit_code == 1


def test_voice_confirmed_records_transaction():
    r = _invoke("voice", "打车花了12.73元", "--date", "2025-09-10", input="y\n")
    assert r.exit_code == 0, r.output
    assert "金额: ¥12.73" in r.output
    assert "分类: 交通" in r.output

    (tx,) = _load().transactions
    assert tx.amount == Decimal("12.73")
    assert tx.category.name == "交通"
    assert tx.date == dt.date(2025, 9, 10)


def test_voice_declined_saves_nothing():
    r = _invoke("voice", "午饭花了30元", input="n\n")
    assert r.exit_code == 0, r.output
    assert "Cancelled." in r.output
    assert _load().transactions == ()


def test_voice_without_amount_fails_cleanly():
    r = _invoke("voice", "你好", "--yes")
    assert r.exit_code == 1
    assert "could not understand" in r.output


def test_custom_category_lifecycle():
    r = _invoke("add-category", "宠物", "--icon", "🐱")
    assert r.exit_code == 0, r.output
    _invoke("add", "66", "--category", "宠物", "--date", "2025-09-02")

    r = _invoke("categories", "--type", "expense")
    assert "宠物" in r.output

    r = _invoke("delete-category", "宠物")
    assert r.exit_code == 0, r.output
    assert "1 transaction(s) moved to 未分类" in r.output

    store = _load()
    assert store.custom_categories == ()
    assert store.transactions[0].category == UNCATEGORIZED[TransactionType.EXPENSE]


def test_predefined_category_cannot_be_deleted():
    r = _invoke("delete-category", "餐饮")
    assert r.exit_code == 1


def test_seed_and_report_trends():
    r = _invoke("seed")
    assert r.exit_code == 0, r.output
    assert "Seeded 18 transactions" in r.output

    r = _invoke("report-trends")
    assert r.exit_code == 0, r.output
    assert "住房" in r.output
    assert "合计" in r.output


def test_report_trends_on_empty_ledger():
    r = _invoke("report-trends", "--type", "income")
    assert r.exit_code == 0
    assert "No transactions to report." in r.output


def test_delete_category_prefers_custom_over_predefined_with_same_name():
    r = _invoke("add-category", "餐饮", "--icon", "🍜")
    assert r.exit_code == 0, r.output
    _invoke("add", "18", "--category", "餐饮", "--date", "2025-09-02")

    r = _invoke("delete-category", "餐饮")
    assert r.exit_code == 0, r.output

    store = _load()
    assert store.custom_categories == ()
    assert "餐饮" in {c.name for c in store.all_categories()}
