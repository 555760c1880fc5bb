"""Pytest configuration for test isolation.

The ledger database defaults to ``<FT_DATA_DIR>/ledger.db`` and the SQLAlchemy
engine is a process-wide singleton. To keep tests hermetic, every test gets
its own data directory and database URL, and the shared engine is disposed
before and after the test so the next one can bind to a fresh file.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engine

from finance_tracker.logging_setup import reset_logging


@pytest.fixture(autouse=True)
def _isolate_data_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Point the default database at the test's own temporary directory."""

    data_dir = tmp_path / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("FT_DATA_DIR", os.fspath(data_dir))
    monkeypatch.setenv("DATABASE_URL", f"sqlite+pysqlite:///{data_dir / 'ledger.db'}")
    # Keep CLI runs quiet; each run binds its handler to that run's stderr.
    monkeypatch.setenv("FINANCE_TRACKER_LOG_LEVEL", "WARNING")
    dispose_engine()
    yield
    dispose_engine()
    reset_logging()
