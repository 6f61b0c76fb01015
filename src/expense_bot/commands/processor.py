"""Wake-word command dispatch.

Commands are matched by substring against the lower-cased, whitespace-normalized
text that remains after the wake word is stripped. Routes are checked in
table order; the first route with a matching keyword wins.
"""

import re
from dataclasses import dataclass
from datetime import date
from typing import Awaitable, Callable

from expense_bot.commands.summaries import (
    delete_latest_expense,
    expense_statistics,
    expense_summary,
    low_stock_summary,
)
from expense_bot.config import Settings
from expense_bot.messages import ACKNOWLEDGED_TEXT, HELP_TEXT
from expense_bot.store.client import RecordStore

CommandHandler = Callable[[RecordStore, Settings, date], Awaitable[str]]

HELP_WORDS = frozenset({"", "help", "help me", "ช่วย", "?", "คำสั่ง"})


@dataclass(frozen=True)
class CommandRoute:
    name: str
    keywords: tuple[str, ...]
    handler: CommandHandler


def _summary(period: str) -> CommandHandler:
    async def handler(store: RecordStore, settings: Settings, today: date) -> str:
        return await expense_summary(period, store, settings, today)

    return handler


async def _stock(store: RecordStore, settings: Settings, today: date) -> str:
    return await low_stock_summary(store, settings)


async def _statistics(store: RecordStore, settings: Settings, today: date) -> str:
    return await expense_statistics(store, settings, today)


async def _delete_latest(store: RecordStore, settings: Settings, today: date) -> str:
    return await delete_latest_expense(store, settings)


COMMAND_ROUTES: tuple[CommandRoute, ...] = (
    CommandRoute("expense_today", ("ค่าใช้จ่ายวันนี้", "expense today"), _summary("today")),
    CommandRoute("expense_week", ("ค่าใช้จ่ายสัปดาห์", "expense week"), _summary("week")),
    CommandRoute("expense_month", ("ค่าใช้จ่ายเดือน", "expense month"), _summary("month")),
    CommandRoute("stock", ("สต็อก", "stock", "สินค้า"), _stock),
    CommandRoute("delete_latest", ("ลบรายการล่าสุด", "delete latest"), _delete_latest),
    CommandRoute("statistics", ("สถิติ", "statistics", "stat", "summary"), _statistics),
)


def has_wake_word(text: str, wake_word: str) -> bool:
    return bool(wake_word) and wake_word.lower() in text.lower()


def strip_wake_word(text: str, wake_word: str) -> str:
    """Remove the first occurrence of the wake word and the whitespace after it."""
    pattern = re.compile(re.escape(wake_word) + r"\s*", re.IGNORECASE)
    return pattern.sub("", text, count=1).strip()


def normalize_command(command: str) -> str:
    return " ".join(command.lower().split())


def resolve_route(command: str) -> CommandRoute | None:
    """Return the route for a normalized command, or None for help/unknown."""
    for route in COMMAND_ROUTES:
        if any(keyword in command for keyword in route.keywords):
            return route
    return None


async def process_command(
    command: str, store: RecordStore, settings: Settings, today: date
) -> str:
    """Run one wake-word command and return the reply text."""
    normalized = normalize_command(command)
    if normalized in HELP_WORDS:
        return HELP_TEXT

    route = resolve_route(normalized)
    if route is None:
        return ACKNOWLEDGED_TEXT
    return await route.handler(store, settings, today)
