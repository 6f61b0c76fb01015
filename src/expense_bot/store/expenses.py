"""Expense, message-log, and inventory operations on top of RecordStore.

Rows coming back from the store are validated into models here, so callers
never see raw dicts. A row that fails validation is a store failure.
"""

import logging
from datetime import date, datetime, timezone

from pydantic import ValidationError

from expense_bot.config import Settings
from expense_bot.models.events import InboundEvent, MessageType
from expense_bot.models.expense import ExtractedExpense, StoredExpenseRecord
from expense_bot.models.inventory import InventoryItem
from expense_bot.store.client import Filter, RecordStore, StoreError

logger = logging.getLogger(__name__)

NOTES_PREFIX = "บันทึกจาก LINE Bot: "


def build_expense_row(
    expense: ExtractedExpense, user_id: str | None, today: date
) -> dict:
    """Map an extracted expense to an insertable row. Missing date means today."""
    return {
        "user_id": user_id,
        "category": expense.category,
        "subcategory": expense.subcategory,
        "description": expense.description,
        "amount": str(expense.amount),
        "expense_date": (expense.expense_date or today).isoformat(),
        "payment_method": expense.payment_method,
        "vendor": expense.vendor,
        "notes": f"{NOTES_PREFIX}{expense.original_message}",
        "status": "approved",
    }


def _to_records(rows: list[dict]) -> list[StoredExpenseRecord]:
    try:
        return [StoredExpenseRecord.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise StoreError(f"Unexpected expense row shape: {exc}") from exc


async def insert_expense(
    store: RecordStore,
    settings: Settings,
    expense: ExtractedExpense,
    user_id: str | None,
    today: date,
) -> StoredExpenseRecord:
    """Insert an expense and return the stored record.

    Raises StoreError if the insert fails or the returned row has no usable id.
    """
    row = await store.insert(settings.expenses_table, build_expense_row(expense, user_id, today))
    (record,) = _to_records([row])
    return record


async def query_expenses_since(
    store: RecordStore,
    settings: Settings,
    since: date,
    limit: int | None = None,
) -> list[StoredExpenseRecord]:
    """Expenses with ``expense_date >= since``, most recent business date first."""
    rows = await store.query(
        settings.expenses_table,
        filters=[Filter.gte("expense_date", since.isoformat())],
        order="expense_date",
        limit=limit,
    )
    return _to_records(rows)


async def query_latest_created_expense(
    store: RecordStore, settings: Settings
) -> StoredExpenseRecord | None:
    rows = await store.query(
        settings.expenses_table,
        filters=[Filter.not_null("created_at")],
        order="created_at",
        limit=1,
    )
    records = _to_records(rows)
    return records[0] if records else None


async def delete_expense(
    store: RecordStore, settings: Settings, record_id: int | str
) -> StoredExpenseRecord | None:
    row = await store.delete(settings.expenses_table, [Filter.eq("id", record_id)])
    if row is None:
        return None
    (record,) = _to_records([row])
    return record


async def query_inventory(store: RecordStore, settings: Settings) -> list[InventoryItem]:
    rows = await store.query(
        settings.inventory_table,
        filters=[
            Filter.not_null("current_stock"),
            Filter.not_null("min_stock"),
            Filter.eq("is_active", True),
        ],
        select="name,current_stock,min_stock,unit",
    )
    try:
        return [InventoryItem.model_validate(row) for row in rows]
    except ValidationError as exc:
        raise StoreError(f"Unexpected inventory row shape: {exc}") from exc


def build_message_row(event: InboundEvent, processed: bool) -> dict:
    """Map an inbound event to a raw message-log row.

    Images are not downloaded; only a placeholder reference to the LINE
    content id is stored.
    """
    created_at = (
        datetime.fromtimestamp(event.timestamp / 1000, timezone.utc)
        if event.timestamp is not None
        else datetime.now(timezone.utc)
    )
    image_ref = (
        f"line-content:{event.message_id}"
        if event.message_type is MessageType.IMAGE and event.message_id
        else None
    )
    row = {
        "message_text": event.text,
        "message_type": event.raw_payload.get("message", {}).get("type", event.message_type.value),
        "source_type": event.source_type.value,
        "source_id": event.source_id,
        "user_id": event.user_id,
        "image_url": image_ref,
        "raw_data": event.raw_payload,
        "processed": processed,
        "created_at": created_at.isoformat(),
    }
    if processed:
        row["processed_at"] = datetime.now(timezone.utc).isoformat()
    return row


async def log_message(
    store: RecordStore, settings: Settings, event: InboundEvent, processed: bool
) -> bool:
    """Write the raw message log. Never raises; a conflict means it is already logged."""
    try:
        await store.insert(settings.messages_table, build_message_row(event, processed))
    except StoreError as exc:
        if exc.is_conflict or "duplicate" in str(exc):
            logger.info("Message already logged", extra={"source_id": event.source_id})
            return True
        logger.error("Failed to log message: %s", exc)
        return False
    return True


async def query_unprocessed_messages(
    store: RecordStore, settings: Settings, limit: int = 100
) -> list[dict]:
    """Text messages whose expense attempt was never confirmed, oldest first."""
    return await store.query(
        settings.messages_table,
        filters=[Filter.eq("processed", False), Filter.eq("message_type", "text")],
        order="created_at",
        descending=False,
        limit=limit,
    )


async def mark_message_processed(
    store: RecordStore, settings: Settings, message_id: int | str
) -> None:
    await store.update(
        settings.messages_table,
        [Filter.eq("id", message_id)],
        {"processed": True, "processed_at": datetime.now(timezone.utc).isoformat()},
    )
