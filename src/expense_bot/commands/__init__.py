"""Wake-word gated commands: summaries, low stock, statistics, delete latest, help."""

from expense_bot.commands.processor import (
    has_wake_word,
    process_command,
    resolve_route,
    strip_wake_word,
)

__all__ = [
    "has_wake_word",
    "process_command",
    "resolve_route",
    "strip_wake_word",
]
