"""Expense extraction: keyword gate, amount/date/vendor rules, and category mapping.

Public API:
    extract_expense(text) -> ExtractedExpense | None
        Single entry point; pure and deterministic.
"""

from expense_bot.extraction.expense import extract_expense, looks_like_expense

__all__ = [
    "extract_expense",
    "looks_like_expense",
]
