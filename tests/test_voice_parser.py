from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from finance_tracker.api import record_voice_transaction
from finance_tracker.categories import FOOD, SALARY, TRANSPORT, CategoryCatalog
from finance_tracker.models import TransactionType
from finance_tracker.store import TransactionStore
from finance_tracker.voice_parser import (
    DEFAULT_DESCRIPTION,
    VoiceTransactionParser,
    to_transaction,
)

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME


# ---- Helpers -----------------------------------------------------------------


def _parse(text: str, expected: TransactionType = EXPENSE):
    return VoiceTransactionParser().parse(text, expected)


# ---- Amounts -----------------------------------------------------------------


def test_lunch_with_yuan_unit():
    parsed = _parse("午饭花了30元")
    assert parsed is not None
    assert parsed.amount == Decimal("30")
    assert parsed.type is EXPENSE
    assert parsed.category == "餐饮"
    assert parsed.description == "午饭花了"


def test_decimal_amount_and_transport_keyword():
    parsed = _parse("打车花了12.73元")
    assert parsed is not None
    assert parsed.amount == Decimal("12.73")
    assert parsed.category == "交通"


def test_thousands_separator_is_stripped():
    parsed = _parse("工资收入50,000元")
    assert parsed is not None
    assert parsed.amount == Decimal("50000")


def test_kuaiqian_pattern_and_charging_maps_to_transport():
    parsed = _parse("充电花了5块钱")
    assert parsed is not None
    assert parsed.amount == Decimal("5")
    assert parsed.category == "交通"
    assert "5块钱" not in parsed.description


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("买水3毛", Decimal("0.3")),
        ("买糖5角", Decimal("0.5")),
        ("找零50分", Decimal("0.5")),
        ("看电影花了80", Decimal("80")),
    ],
)
def test_sub_units_and_bare_number(text: str, expected: Decimal):
    parsed = _parse(text)
    assert parsed is not None
    assert parsed.amount == expected


def test_first_pattern_in_priority_order_wins():
    # "元" outranks the bare number even though "2" appears first.
    parsed = _parse("买了2杯咖啡共36元")
    assert parsed is not None
    assert parsed.amount == Decimal("36")
    assert parsed.category == "餐饮"


@pytest.mark.parametrize("text", ["", "   ", "你好", "今天天气不错"])
def test_no_amount_returns_none(text: str):
    assert _parse(text) is None


def test_zero_amount_returns_none():
    assert _parse("花了0元") is None


@pytest.mark.parametrize("text", ["花了0.001元", "花了0.004元"])
def test_amount_rounding_to_zero_returns_none(text: str):
    assert _parse(text) is None
    store = TransactionStore()
    assert record_voice_transaction(store, text) is None
    assert store.transactions == ()


def test_amount_is_rounded_to_cents():
    parsed = _parse("打车花了12.345元")
    assert parsed is not None
    assert parsed.amount == Decimal("12.35")
    tx = to_transaction(parsed, CategoryCatalog())
    assert tx.amount == parsed.amount


# ---- Type inference ----------------------------------------------------------


def test_income_keyword_overrides_expected_type():
    parsed = _parse("工资收入5000元", EXPENSE)
    assert parsed is not None
    assert parsed.type is INCOME
    assert parsed.amount == Decimal("5000")
    assert parsed.category == "工资"


def test_income_keywords_are_checked_before_expense_keywords():
    parsed = _parse("转账收到500元", EXPENSE)
    assert parsed is not None
    assert parsed.type is INCOME


def test_expense_keyword_overrides_income_hint():
    parsed = _parse("买衣服花了299元", INCOME)
    assert parsed is not None
    assert parsed.type is EXPENSE
    assert parsed.category == "购物"


def test_falls_back_to_expected_type_without_keywords():
    parsed = _parse("体检450元", INCOME)
    assert parsed is not None
    assert parsed.type is INCOME
    assert parsed.category == "医疗"


# ---- Category rules ----------------------------------------------------------


def test_longer_keyword_beats_shorter_one():
    # "红包" must not be read as the shopping keyword "包".
    parsed = _parse("收到红包200元")
    assert parsed is not None
    assert parsed.category == "红包"
    assert parsed.type is INCOME


def test_category_keywords_are_case_insensitive():
    parsed = _parse("ktv唱歌200元")
    assert parsed is not None
    assert parsed.category == "娱乐"


def test_unknown_category_is_none():
    parsed = _parse("花了20元")
    assert parsed is not None
    assert parsed.category is None


def test_custom_rules_replace_defaults():
    parser = VoiceTransactionParser(category_rules=[("猫粮", "宠物")])
    parsed = parser.parse("猫粮花了88元", EXPENSE)
    assert parsed is not None
    assert parsed.category == "宠物"


# ---- Descriptions ------------------------------------------------------------


def test_short_description_falls_back_to_category_label():
    parsed = _parse("饭30元")
    assert parsed is not None
    assert parsed.description == "餐饮消费"


def test_short_description_without_category_uses_default_label():
    parsed = _parse("30元")
    assert parsed is not None
    assert parsed.description == DEFAULT_DESCRIPTION


def test_description_whitespace_is_collapsed():
    parsed = _parse("  打车   花了 12 元  ")
    assert parsed is not None
    assert parsed.description == "打车 花了"


# ---- Conversion to a transaction ---------------------------------------------


def test_to_transaction_resolves_category_by_name():
    catalog = CategoryCatalog()
    parsed = _parse("午饭花了30元")
    assert parsed is not None
    tx = to_transaction(parsed, catalog, on=dt.date(2025, 9, 10))
    assert tx.category == FOOD
    assert tx.amount == Decimal("30.00")
    assert tx.date == dt.date(2025, 9, 10)
    assert tx.note == "午饭花了"


def test_to_transaction_unknown_name_uses_first_category_of_type():
    catalog = CategoryCatalog()
    parsed = _parse("房租3000元")
    assert parsed is not None
    # "居住" is not a catalog name; expense default is the first expense category.
    tx = to_transaction(parsed, catalog)
    assert tx.category == FOOD
    assert tx.type is EXPENSE


def test_to_transaction_income_category():
    catalog = CategoryCatalog()
    parsed = _parse("工资收入5000元")
    assert parsed is not None
    assert to_transaction(parsed, catalog).category == SALARY


def test_to_transaction_matches_custom_category():
    catalog = CategoryCatalog()
    custom = catalog.add_custom_category("红包", "🧧", INCOME)
    parsed = _parse("收到红包200元")
    assert parsed is not None
    assert to_transaction(parsed, catalog).category == custom


def test_transport_constant_is_reachable_by_name():
    catalog = CategoryCatalog()
    assert catalog.resolve("交通", EXPENSE) == TRANSPORT
