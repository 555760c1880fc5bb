"""Public API interfaces and orchestration for the ``finance_tracker`` package.

This module primarily serves as a stable import surface: the store, catalog,
filters and reports live in their own modules and are re-exported here. The
few functions defined here compose them for callers (the CLI, an app shell)
that do not want to wire the voice parser and the store together themselves.
"""

from __future__ import annotations

import datetime as dt

from .filters import FilterType, build_filter  # noqa: F401  (re-export)
from .logging_setup import get_logger
from .models import ParsedTransaction, Transaction, TransactionType
from .reports import report_trends
from .store import TransactionStore
from .voice_parser import VoiceTransactionParser, to_transaction

_logger = get_logger("finance_tracker.api")

_DEFAULT_PARSER = VoiceTransactionParser()


def parse_voice_input(
    text: str,
    expected_type: TransactionType = TransactionType.EXPENSE,
    *,
    parser: VoiceTransactionParser | None = None,
) -> ParsedTransaction | None:
    """Parse a transcript with the default rule tables (or ``parser``)."""

    return (parser or _DEFAULT_PARSER).parse(text, expected_type)


def record_voice_transaction(
    store: TransactionStore,
    text: str,
    expected_type: TransactionType = TransactionType.EXPENSE,
    *,
    on: dt.date | None = None,
    parser: VoiceTransactionParser | None = None,
) -> Transaction | None:
    """Parse ``text`` and add the resulting transaction to ``store``.

    Returns the added transaction, or ``None`` when the text carries no usable
    amount (nothing is added in that case). Persisting is left to the caller
    via :meth:`TransactionStore.save_all_data`.
    """

    parsed = parse_voice_input(text, expected_type, parser=parser)
    if parsed is None:
        return None
    tx = to_transaction(parsed, store.catalog, on=on)
    store.add_transaction(tx)
    _logger.info(
        "voice:recorded id=%s type=%s category=%s amount=%s",
        tx.id,
        tx.type.value,
        tx.category.name,
        tx.amount,
    )
    return tx


def trends_for(
    store: TransactionStore,
    filter_type: FilterType | None = None,
    tx_type: TransactionType = TransactionType.EXPENSE,
) -> str:
    """Trend table over the store, optionally narrowed by ``filter_type``."""

    txs = store.transactions if filter_type is None else store.filter(filter_type)
    return report_trends(txs, tx_type)


__all__ = [
    "FilterType",
    "TransactionStore",
    "VoiceTransactionParser",
    "build_filter",
    "parse_voice_input",
    "record_voice_transaction",
    "report_trends",
    "to_transaction",
    "trends_for",
]
