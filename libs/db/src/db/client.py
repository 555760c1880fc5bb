"""Centralized SQLAlchemy engine/session helpers for the workspace.

Usage
-----
from db.client import session_scope

with session_scope() as s:
    s.execute(...)

The database URL comes from the explicit ``database_url`` argument, else
``DATABASE_URL``, else a local SQLite file ``<FT_DATA_DIR or ./.data>/ledger.db``.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

_ENGINE: Engine | None = None
_SESSION_MAKER: sessionmaker[Session] | None = None
_DB_URL: str | None = None

_DEFAULT_DB_FILE = "ledger.db"


def _default_sqlite_url() -> str:
    root = os.getenv("FT_DATA_DIR")
    base = Path(root).expanduser() if root and root.strip() else Path.cwd() / ".data"
    return f"sqlite+pysqlite:///{(base / _DEFAULT_DB_FILE).resolve()}"


def resolve_database_url(override: str | None = None) -> str:
    return override or os.getenv("DATABASE_URL") or _default_sqlite_url()


def _ensure_sqlite_parent(url: str) -> None:
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite" or not parsed.database:
        return
    if parsed.database == ":memory:":
        return
    Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)


def get_engine(*, database_url: str | None = None) -> Engine:
    """Return a shared SQLAlchemy engine, creating it on first use."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    url = resolve_database_url(database_url)
    if _ENGINE is None:
        _ensure_sqlite_parent(url)
        engine = create_engine(url, pool_pre_ping=True)
        _SESSION_MAKER = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)
        _ENGINE = engine
        _DB_URL = url
        return engine
    # Engine already initialized; guard against cross-environment misuse.
    if _DB_URL is not None and url != _DB_URL:
        raise RuntimeError(
            "get_engine() already initialized with a different DATABASE_URL; "
            "call dispose_engine() first or avoid passing a different URL"
        )
    return _ENGINE


def dispose_engine() -> None:
    """Dispose the shared engine so the next call may target another database."""

    global _ENGINE, _SESSION_MAKER, _DB_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _SESSION_MAKER = None
    _DB_URL = None


def get_session(*, database_url: str | None = None) -> Session:
    """Return a new SQLAlchemy session bound to the shared engine."""

    get_engine(database_url=database_url)
    assert _SESSION_MAKER is not None  # bound by get_engine
    return _SESSION_MAKER()


@contextmanager
def session_scope(*, database_url: str | None = None) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = get_session(database_url=database_url)
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "resolve_database_url",
    "dispose_engine",
    "get_engine",
    "get_session",
    "session_scope",
]
