"""Webhook event dispatch and the persist-then-confirm expense pipeline."""

import logging
from dataclasses import dataclass
from datetime import date

from linebot.v3.messaging import AsyncMessagingApi

from expense_bot.clock import local_today
from expense_bot.commands import has_wake_word, process_command, strip_wake_word
from expense_bot.config import Settings
from expense_bot.extraction import extract_expense
from expense_bot.line.events import get_raw_events, parse_event
from expense_bot.line.notifier import send_reply
from expense_bot.messages import COMMAND_ERROR_TEXT, duplicate_text, recorded_text
from expense_bot.models.events import InboundEvent, MessageEvent, MessageType
from expense_bot.models.expense import ExpenseOutcome, ExpenseStatus
from expense_bot.store.client import RecordStore, StoreError
from expense_bot.store.duplicates import check_duplicate
from expense_bot.store.expenses import insert_expense, log_message

logger = logging.getLogger(__name__)


@dataclass
class WebhookResult:
    events_received: int
    processed_count: int


async def handle_webhook(
    payload: dict,
    settings: Settings,
    store: RecordStore,
    messaging_api: AsyncMessagingApi,
) -> WebhookResult:
    """Process every event in a webhook batch, sequentially.

    Each event is isolated: an exception is logged and the remaining events
    are still processed. A zero-event batch (LINE connectivity check) does nothing.
    """
    raw_events = get_raw_events(payload)
    if not raw_events:
        logger.info("Webhook verification request received")
        return WebhookResult(events_received=0, processed_count=0)

    processed = 0
    for raw in raw_events:
        try:
            if await handle_event(raw, settings, store, messaging_api):
                processed += 1
        except Exception as exc:
            logger.error("Event processing failed: %s", exc, exc_info=True)

    logger.info(
        "Processed %d out of %d events", processed, len(raw_events),
        extra={"events_received": len(raw_events), "processed_count": processed},
    )
    return WebhookResult(events_received=len(raw_events), processed_count=processed)


async def handle_event(
    raw: dict,
    settings: Settings,
    store: RecordStore,
    messaging_api: AsyncMessagingApi,
) -> bool:
    """Dispatch one raw event by type. Returns True if a message event was handled."""
    event = parse_event(raw)
    if not isinstance(event, MessageEvent):
        if event is not None:
            logger.info("Skipping %s event", event.type)
        return False

    inbound = InboundEvent.from_message_event(event, raw)
    await handle_message(inbound, settings, store, messaging_api)
    return True


async def handle_message(
    inbound: InboundEvent,
    settings: Settings,
    store: RecordStore,
    messaging_api: AsyncMessagingApi,
) -> None:
    """Run the expense pipeline (always) and the command pipeline (wake word only).

    Replies for one event are collected and sent in a single call because a
    reply token can be used only once.
    """
    if inbound.message_type is not MessageType.TEXT or not inbound.text.strip():
        logger.info(
            "Non-text message logged only",
            extra={"message_type": inbound.message_type.value, "source_id": inbound.source_id},
        )
        await log_message(store, settings, inbound, processed=True)
        return

    today = local_today(settings.timezone)
    replies: list[str] = []

    outcome = await record_expense(inbound.text, inbound.user_id, store, settings, today)
    await log_message(
        store, settings, inbound, processed=outcome.status is not ExpenseStatus.FAILED
    )
    feedback = confirmation_text(outcome)
    if feedback:
        replies.append(feedback)

    if has_wake_word(inbound.text, settings.wake_word):
        command = strip_wake_word(inbound.text, settings.wake_word)
        try:
            replies.append(await process_command(command, store, settings, today))
        except Exception as exc:
            logger.error("Command failed: %s", exc, exc_info=True, extra={"command": command})
            replies.append(COMMAND_ERROR_TEXT)

    if replies and inbound.reply_token:
        await send_reply(
            messaging_api, inbound.reply_token, replies, timeout=settings.reply_timeout_seconds
        )


async def record_expense(
    text: str,
    user_id: str | None,
    store: RecordStore,
    settings: Settings,
    today: date,
) -> ExpenseOutcome:
    """Extract, de-duplicate, and persist one expense.

    Persist-then-confirm: the outcome is RECORDED only when the store returned
    the inserted row with an id, and DUPLICATE only when an existing stored
    record matched. Every store failure, including a failed duplicate lookup,
    yields FAILED with nothing written after it.
    """
    expense = extract_expense(text, max_amount=settings.max_amount)
    if expense is None:
        return ExpenseOutcome(status=ExpenseStatus.NOT_EXPENSE)

    logger.info(
        "Expense parsed",
        extra={"amount": str(expense.amount), "category": expense.category},
    )

    try:
        duplicate = await check_duplicate(store, settings, expense, today)
    except StoreError as exc:
        logger.error("Duplicate check failed, not recording: %s", exc)
        return ExpenseOutcome(status=ExpenseStatus.FAILED, expense=expense)

    if duplicate is not None:
        return ExpenseOutcome(status=ExpenseStatus.DUPLICATE, expense=expense, duplicate=duplicate)

    try:
        record = await insert_expense(store, settings, expense, user_id, today)
    except StoreError as exc:
        logger.error("Expense insert failed, no confirmation sent: %s", exc)
        return ExpenseOutcome(status=ExpenseStatus.FAILED, expense=expense)

    logger.info("Expense recorded", extra={"expense_id": str(record.id)})
    return ExpenseOutcome(status=ExpenseStatus.RECORDED, expense=expense, record=record)


def confirmation_text(outcome: ExpenseOutcome) -> str | None:
    """Reply text for a confirmed outcome; None for anything unconfirmed."""
    if not outcome.is_confirmed:
        return None
    if outcome.status is ExpenseStatus.DUPLICATE:
        return duplicate_text(outcome.duplicate.existing_record)
    return recorded_text(outcome.expense, outcome.record)
