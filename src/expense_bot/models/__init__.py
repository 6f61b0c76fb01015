"""Data models and enums for the expense bot pipeline."""

from expense_bot.models.events import (
    EventSource,
    InboundEvent,
    MessageContent,
    MessageEvent,
    MessageType,
    SourceType,
    WebhookEvent,
)
from expense_bot.models.expense import (
    DuplicateMatch,
    ExpenseOutcome,
    ExpenseStatus,
    ExtractedExpense,
    StoredExpenseRecord,
)
from expense_bot.models.inventory import InventoryItem

__all__ = [
    "DuplicateMatch",
    "EventSource",
    "ExpenseOutcome",
    "ExpenseStatus",
    "ExtractedExpense",
    "InboundEvent",
    "InventoryItem",
    "MessageContent",
    "MessageEvent",
    "MessageType",
    "SourceType",
    "StoredExpenseRecord",
    "WebhookEvent",
]
