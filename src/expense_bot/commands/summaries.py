"""Read-mostly command branches: expense summaries, low stock, statistics, delete latest."""

import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal

from expense_bot.clock import days_ago
from expense_bot.config import Settings
from expense_bot.messages import (
    DELETE_ERROR_TEXT,
    FETCH_ERROR_TEXT,
    NOTHING_TO_DELETE_TEXT,
    deleted_text,
    expense_summary_text,
    low_stock_text,
    statistics_text,
)
from expense_bot.store.client import RecordStore, StoreError
from expense_bot.store.expenses import (
    delete_expense,
    query_expenses_since,
    query_inventory,
    query_latest_created_expense,
)

logger = logging.getLogger(__name__)

# Trailing window in days; "today" is the current calendar day
PERIOD_DAYS = {
    "today": 0,
    "week": 7,
    "month": 30,
}
STATISTICS_DAYS = 30


async def expense_summary(
    period: str, store: RecordStore, settings: Settings, today: date
) -> str:
    since = days_ago(today, PERIOD_DAYS[period])
    try:
        records = await query_expenses_since(store, settings, since)
    except StoreError as exc:
        logger.error("Expense summary query failed: %s", exc, extra={"period": period})
        return FETCH_ERROR_TEXT
    return expense_summary_text(period, records)


async def low_stock_summary(store: RecordStore, settings: Settings) -> str:
    try:
        items = await query_inventory(store, settings)
    except StoreError as exc:
        logger.error("Inventory query failed: %s", exc)
        return FETCH_ERROR_TEXT
    return low_stock_text([item for item in items if item.is_low_stock])


async def expense_statistics(store: RecordStore, settings: Settings, today: date) -> str:
    try:
        records = await query_expenses_since(store, settings, days_ago(today, STATISTICS_DAYS))
    except StoreError as exc:
        logger.error("Statistics query failed: %s", exc)
        return FETCH_ERROR_TEXT

    totals: dict[str, Decimal] = defaultdict(Decimal)
    for record in records:
        totals[record.category or "other"] += record.amount
    by_category = sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
    total = sum(totals.values(), Decimal("0"))
    return statistics_text(total, len(records), by_category)


async def delete_latest_expense(store: RecordStore, settings: Settings) -> str:
    """Delete the most recently created expense (by created_at, not business date)."""
    try:
        latest = await query_latest_created_expense(store, settings)
        if latest is None:
            return NOTHING_TO_DELETE_TEXT
        deleted = await delete_expense(store, settings, latest.id)
    except StoreError as exc:
        logger.error("Delete latest expense failed: %s", exc)
        return DELETE_ERROR_TEXT

    if deleted is None:
        return NOTHING_TO_DELETE_TEXT
    logger.info("Deleted latest expense", extra={"expense_id": str(deleted.id)})
    return deleted_text(deleted)
