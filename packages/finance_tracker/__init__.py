"""Public interface for the ``finance_tracker`` package.

Re-exports the models, the store and the API functions as the stable import
surface. There is no runtime logic here, only symbol re-exports. The SQL
repository lives in ``finance_tracker.persistence`` and is not imported here
so that the core does not pull in a database engine.
"""

from .api import (
    parse_voice_input,
    record_voice_transaction,
    report_trends,
    trends_for,
)
from .categories import PREDEFINED_CATEGORIES, UNCATEGORIZED, CategoryCatalog
from .filters import FilterType, build_filter
from .models import (
    Category,
    ParsedTransaction,
    StoreSnapshot,
    Transaction,
    TransactionType,
)
from .store import TransactionStore
from .voice_parser import VoiceTransactionParser

__all__ = [
    # API
    "parse_voice_input",
    "record_voice_transaction",
    "report_trends",
    "trends_for",
    # Core
    "CategoryCatalog",
    "TransactionStore",
    "VoiceTransactionParser",
    "build_filter",
    "PREDEFINED_CATEGORIES",
    "UNCATEGORIZED",
    # Models / types
    "Category",
    "FilterType",
    "ParsedTransaction",
    "StoreSnapshot",
    "Transaction",
    "TransactionType",
]
