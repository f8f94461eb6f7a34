"""SQLite database engine, schema, ID counters and the quote repository."""

from quotectl.infrastructure.database.counters import (
    ITEM_PREFIX,
    QUOTE_PREFIX,
    next_sequential_id,
)
from quotectl.infrastructure.database.engine import create_db_engine, init_database
from quotectl.infrastructure.database.repository import QuoteRepository
from quotectl.infrastructure.database.schema import id_counters, metadata, quote_items, quotes

__all__ = [
    "ITEM_PREFIX",
    "QUOTE_PREFIX",
    "QuoteRepository",
    "create_db_engine",
    "id_counters",
    "init_database",
    "metadata",
    "next_sequential_id",
    "quote_items",
    "quotes",
]
