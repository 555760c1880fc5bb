from __future__ import annotations

import datetime as dt
import uuid
from decimal import Decimal
from pathlib import Path

from db.client import session_scope
from db.models.ledger import LedgerTransaction
from sqlalchemy import select

from finance_tracker.categories import FOOD, SALARY, UNCATEGORIZED
from finance_tracker.models import (
    StoreSnapshot,
    Transaction,
    TransactionRecord,
    TransactionType,
)
from finance_tracker.persistence import InMemoryStateRepository, SqlStateRepository
from finance_tracker.store import TransactionStore

EXPENSE = TransactionType.EXPENSE
INCOME = TransactionType.INCOME


# ---- Helpers -----------------------------------------------------------------


def _sqlite_url(tmp_path: Path) -> str:
    return f"sqlite+pysqlite:///{tmp_path / 'ledger.db'}"


def _populated_store(repo) -> TransactionStore:
    store = TransactionStore(repository=repo)
    pet = store.add_custom_category("宠物", "🐱", EXPENSE)
    store.add_transaction(
        Transaction(amount="12.34", category=FOOD, type=EXPENSE, date=dt.date(2025, 9, 1))
    )
    store.add_transaction(
        Transaction(amount="5000", category=SALARY, type=INCOME, date=dt.date(2025, 9, 1))
    )
    store.add_transaction(
        Transaction(
            amount="66.6", category=pet, type=EXPENSE, date=dt.date(2025, 9, 2), note="猫粮"
        )
    )
    return store


# ---- SQL repository ----------------------------------------------------------


def test_sql_round_trip_preserves_everything(tmp_path: Path):
    url = _sqlite_url(tmp_path)
    store = _populated_store(SqlStateRepository(database_url=url))
    store.save_all_data()

    loaded = TransactionStore.load(SqlStateRepository(database_url=url))
    assert loaded.transactions == store.transactions
    assert loaded.custom_categories == store.custom_categories
    assert loaded.balance == Decimal("4921.06")


def test_amounts_are_stored_in_minor_units(tmp_path: Path):
    url = _sqlite_url(tmp_path)
    _populated_store(SqlStateRepository(database_url=url)).save_all_data()

    with session_scope(database_url=url) as s:
        minors = s.scalars(
            select(LedgerTransaction.amount_minor).order_by(LedgerTransaction.position)
        ).all()
    assert minors == [1234, 500000, 6660]


def test_save_replaces_previous_state(tmp_path: Path):
    url = _sqlite_url(tmp_path)
    repo = SqlStateRepository(database_url=url)
    store = _populated_store(repo)
    store.save_all_data()

    store.delete_transaction(store.transactions[0])
    store.save_all_data()

    loaded = TransactionStore.load(repo)
    assert len(loaded.transactions) == 2
    assert FOOD not in {t.category for t in loaded.transactions}


def test_deleted_category_reloads_as_sentinel(tmp_path: Path):
    url = _sqlite_url(tmp_path)
    repo = SqlStateRepository(database_url=url)
    store = _populated_store(repo)
    pet = store.custom_categories[0]
    store.delete_category_and_reassign(pet)
    store.save_all_data()

    loaded = TransactionStore.load(repo)
    assert loaded.custom_categories == ()
    assert loaded.transactions[2].category == UNCATEGORIZED[EXPENSE]
    assert loaded.transactions[2].note == "猫粮"


def test_default_database_lives_under_data_dir(tmp_path: Path, monkeypatch):
    monkeypatch.delenv("DATABASE_URL")
    _populated_store(SqlStateRepository()).save_all_data()
    assert (tmp_path / "data" / "ledger.db").exists()


# ---- Snapshot remapping ------------------------------------------------------


def test_dangling_category_reference_maps_to_sentinel_of_type():
    orphan = TransactionRecord(
        id=uuid.uuid4(),
        amount=Decimal("8"),
        type=INCOME,
        date=dt.date(2025, 9, 1),
        category_id=uuid.uuid4(),
        category_name="已删除",
        category_is_custom=True,
    )
    store = TransactionStore.load(InMemoryStateRepository(StoreSnapshot(transactions=[orphan])))
    assert store.transactions[0].category == UNCATEGORIZED[INCOME]
    assert store.transactions[0].id == orphan.id


def test_predefined_category_with_outdated_id_is_remapped_by_name():
    legacy = TransactionRecord(
        id=uuid.uuid4(),
        amount=Decimal("20"),
        type=EXPENSE,
        date=dt.date(2025, 9, 1),
        category_id=uuid.uuid4(),
        category_name="餐饮",
        category_is_custom=False,
    )
    store = TransactionStore.from_snapshot(StoreSnapshot(transactions=[legacy]))
    assert store.transactions[0].category == FOOD
