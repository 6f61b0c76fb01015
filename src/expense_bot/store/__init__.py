"""Record store: PostgREST client, expense operations, and duplicate detection."""

from expense_bot.store.client import (
    Filter,
    RecordStore,
    StoreError,
    close_record_store,
    get_record_store,
    reset_client,
)
from expense_bot.store.duplicates import check_duplicate, find_duplicate, similarity
from expense_bot.store.expenses import insert_expense, log_message, query_expenses_since

__all__ = [
    "check_duplicate",
    "close_record_store",
    "Filter",
    "find_duplicate",
    "get_record_store",
    "insert_expense",
    "log_message",
    "query_expenses_since",
    "RecordStore",
    "reset_client",
    "similarity",
    "StoreError",
]
