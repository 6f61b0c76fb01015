"""Rule-driven expense extraction from free-text chat messages.

Pure and deterministic: no I/O, no clock. The same text always yields the
same ``ExtractedExpense`` (or ``None`` when the message is not an expense).
"""

import re
from datetime import date
from decimal import Decimal

from expense_bot.extraction.rules import (
    AMOUNT_RULES,
    CATEGORY_RULES,
    CURRENCY_AMOUNT_PATTERN,
    DATE_RULES,
    DEFAULT_CATEGORY,
    DEFAULT_DESCRIPTIONS,
    DEFAULT_PAYMENT_METHOD,
    EXPENSE_KEYWORDS,
    FALLBACK_DESCRIPTION,
    PAYMENT_METHOD_RULES,
    VENDOR_PATTERN,
    CategoryRule,
    parse_amount,
)
from expense_bot.models.expense import ExtractedExpense

DEFAULT_MAX_AMOUNT = Decimal("1000000")
_MIN_DESCRIPTION_LENGTH = 2
_MAX_DESCRIPTION_LENGTH = 200
_WHITESPACE = re.compile(r"\s+")

Span = tuple[int, int]


def looks_like_expense(text: str) -> bool:
    """Over-inclusive gate: expense keyword present, or an explicit currency amount."""
    lowered = text.lower()
    if any(keyword in lowered for keyword in EXPENSE_KEYWORDS):
        return True
    return CURRENCY_AMOUNT_PATTERN.search(text) is not None


def find_expense_date(text: str) -> tuple[date | None, list[Span]]:
    """Return the first valid date in the text and the spans of every date-like match.

    All spans are returned (even invalid dates) so callers can mask them
    before looking for amounts.
    """
    found: date | None = None
    spans: list[Span] = []
    for rule in DATE_RULES:
        for match in rule.pattern.finditer(text):
            spans.append(match.span())
            if found is None:
                found = rule.to_date(match)
    return found, spans


def _mask(text: str, spans: list[Span]) -> str:
    chars = list(text)
    for start, end in spans:
        chars[start:end] = " " * (end - start)
    return "".join(chars)


def find_amount(text: str, max_amount: Decimal = DEFAULT_MAX_AMOUNT) -> tuple[Decimal, Span] | None:
    """Apply amount rules in order; the first value in (0, max_amount) wins."""
    for rule in AMOUNT_RULES:
        for match in rule.pattern.finditer(text):
            value = parse_amount(match.group(1))
            if value is not None and 0 < value < max_amount:
                return value, match.span()
    return None


def match_category(text: str) -> CategoryRule | None:
    """Return the rule with the longest keyword found in the text."""
    lowered = text.lower()
    matches = [rule for rule in CATEGORY_RULES if rule.keyword in lowered]
    if not matches:
        return None
    return max(matches, key=lambda rule: len(rule.keyword))


def build_description(text: str, amount_span: Span, category: str) -> str:
    start, end = amount_span
    remainder = _WHITESPACE.sub(" ", text[:start] + " " + text[end:]).strip()
    if len(remainder) < _MIN_DESCRIPTION_LENGTH:
        return DEFAULT_DESCRIPTIONS.get(category, FALLBACK_DESCRIPTION)
    return remainder[:_MAX_DESCRIPTION_LENGTH]


def find_vendor(text: str) -> str | None:
    match = VENDOR_PATTERN.search(text)
    if not match:
        return None
    vendor = match.group(1).strip()
    return vendor or None


def find_payment_method(text: str) -> str:
    lowered = text.lower()
    for keyword, method in PAYMENT_METHOD_RULES:
        if keyword in lowered:
            return method
    return DEFAULT_PAYMENT_METHOD


def extract_expense(
    text: str, max_amount: Decimal = DEFAULT_MAX_AMOUNT
) -> ExtractedExpense | None:
    """Extract a structured expense from one chat message.

    Returns None when the message fails the keyword/currency gate or has no
    positive amount below ``max_amount``.
    """
    stripped = text.strip()
    if not stripped or not looks_like_expense(stripped):
        return None

    expense_date, date_spans = find_expense_date(stripped)
    found = find_amount(_mask(stripped, date_spans), max_amount)
    if found is None:
        return None
    amount, amount_span = found

    rule = match_category(stripped)
    category = rule.category if rule else DEFAULT_CATEGORY

    return ExtractedExpense(
        amount=amount,
        category=category,
        subcategory=rule.subcategory if rule else None,
        description=build_description(stripped, amount_span, category),
        expense_date=expense_date,
        vendor=find_vendor(stripped),
        payment_method=find_payment_method(stripped),
        original_message=text,
    )
