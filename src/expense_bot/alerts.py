"""Scheduled jobs: low-stock push alert and backfill of unconfirmed messages.

Both are triggered over HTTP by an external scheduler. Neither can reply in
chat: the original reply tokens have long expired.
"""

import logging
from collections import Counter
from datetime import date

from linebot.v3.messaging import AsyncMessagingApi

from expense_bot.clock import event_date, local_today
from expense_bot.config import Settings
from expense_bot.line.handlers import record_expense
from expense_bot.line.notifier import push_text
from expense_bot.messages import low_stock_text
from expense_bot.models.expense import ExpenseStatus
from expense_bot.store.client import RecordStore, StoreError
from expense_bot.store.expenses import (
    mark_message_processed,
    query_inventory,
    query_unprocessed_messages,
)

logger = logging.getLogger(__name__)

BACKFILL_BATCH_SIZE = 100


async def send_stock_alert(
    settings: Settings, store: RecordStore, messaging_api: AsyncMessagingApi
) -> dict:
    """Push the low-stock digest to the configured LINE group.

    Returns:
        Dict with status ("sent", "ok" when nothing is low, or "error") and count.
    """
    if not settings.line_group_id:
        logger.error("Stock alert target not configured")
        return {"status": "error", "error": "LINE group not configured"}

    try:
        items = await query_inventory(store, settings)
    except StoreError as e:
        logger.error("Failed to query inventory for stock alert", extra={"error": str(e)})
        return {"status": "error", "error": "Failed to query inventory"}

    low = [item for item in items if item.is_low_stock]
    if not low:
        logger.info("Stock check OK", extra={"items": len(items)})
        return {"status": "ok", "count": 0}

    sent = await push_text(
        messaging_api,
        settings.line_group_id,
        low_stock_text(low),
        timeout=settings.reply_timeout_seconds,
    )
    if not sent:
        return {"status": "error", "error": "Failed to send LINE message", "count": len(low)}

    logger.info("Stock alert sent", extra={"count": len(low)})
    return {"status": "sent", "count": len(low)}


def _message_day(row: dict, settings: Settings, fallback: date) -> date:
    """Business day a logged message was sent on, used as the default expense date."""
    raw_ts = (row.get("raw_data") or {}).get("timestamp")
    if isinstance(raw_ts, int):
        return event_date(raw_ts, settings.timezone) or fallback
    created_at = row.get("created_at")
    if not created_at:
        return fallback
    try:
        return date.fromisoformat(str(created_at)[:10])
    except ValueError:
        return fallback


async def backfill_unprocessed(settings: Settings, store: RecordStore) -> dict:
    """Re-run the expense pipeline for logged text messages never confirmed.

    Messages are marked processed unless the attempt failed again, so the
    next run retries only what is still unconfirmed.

    Returns:
        Dict with status and a count per pipeline outcome.
    """
    try:
        rows = await query_unprocessed_messages(store, settings, limit=BACKFILL_BATCH_SIZE)
    except StoreError as e:
        logger.error("Failed to query unprocessed messages", extra={"error": str(e)})
        return {"status": "error", "error": "Failed to query messages"}

    today = local_today(settings.timezone)
    counts: Counter[str] = Counter()

    for row in rows:
        outcome = await record_expense(
            row.get("message_text") or "",
            row.get("user_id"),
            store,
            settings,
            _message_day(row, settings, today),
        )
        counts[outcome.status.value] += 1
        if outcome.status is ExpenseStatus.FAILED or row.get("id") is None:
            continue
        try:
            await mark_message_processed(store, settings, row["id"])
        except StoreError as e:
            logger.error("Failed to mark message processed", extra={"error": str(e)})

    logger.info("Backfill complete", extra={"scanned": len(rows), **counts})
    return {"status": "ok", "scanned": len(rows), **{s.value: counts[s.value] for s in ExpenseStatus}}
