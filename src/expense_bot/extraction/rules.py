"""Extraction rule tables for expense messages.

Each rule is data: a name, a compiled pattern, and (where needed) a handler
that turns a match into a value. Rules are listed from most to least specific
and evaluated in order by ``expense_bot.extraction.expense``.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Callable

# Digits with optional thousands separators and up to two decimals: 1,250.50.
# Never starts or ends inside a longer run of digits and separators (1500.555, 1,5000).
_NUMBER = r"(?<![\d.,])(\d{1,3}(?:,\d{3})+(?:\.\d{1,2})?|\d+(?:\.\d{1,2})?)(?![\d.,]*\d)"
_CURRENCY_WORD = r"(?:บาท|baht|thb)"

# Buddhist-era years are 543 ahead of the Gregorian calendar
_BUDDHIST_ERA_OFFSET = 543
_BUDDHIST_ERA_MIN_YEAR = 2400


@dataclass(frozen=True)
class AmountRule:
    name: str
    pattern: re.Pattern[str]


@dataclass(frozen=True)
class DateRule:
    name: str
    pattern: re.Pattern[str]
    to_date: Callable[[re.Match[str]], date | None]


@dataclass(frozen=True)
class CategoryRule:
    keyword: str
    category: str
    subcategory: str | None = None


AMOUNT_RULES: tuple[AmountRule, ...] = (
    AmountRule("number_baht", re.compile(_NUMBER + r"\s*บาท")),
    AmountRule("number_symbol", re.compile(_NUMBER + r"\s*฿")),
    AmountRule("symbol_number", re.compile(r"฿\s*" + _NUMBER)),
    AmountRule("number_code", re.compile(_NUMBER + r"\s*(?:baht|thb)\b", re.IGNORECASE)),
    AmountRule("bare_number", re.compile(_NUMBER)),
)

# Over-inclusive gate: keyword context OR an explicit currency amount
EXPENSE_KEYWORDS: tuple[str, ...] = (
    "ค่าใช้จ่าย",
    "ค่า",
    "จ่าย",
    "ซื้อ",
    "บิล",
    "ชำระ",
    "บัญชี",
    "expense",
    "pay",
    "bill",
    "cost",
)
CURRENCY_AMOUNT_PATTERN = re.compile(
    rf"\d[\d,]*(?:\.\d+)?\s*(?:{_CURRENCY_WORD}|฿)|฿\s*\d", re.IGNORECASE
)


def parse_amount(raw: str) -> Decimal | None:
    """Parse a matched number, stripping thousands separators."""
    try:
        return Decimal(raw.replace(",", ""))
    except InvalidOperation:
        return None


def _safe_date(year: int, month: int, day: int) -> date | None:
    if year > _BUDDHIST_ERA_MIN_YEAR:
        year -= _BUDDHIST_ERA_OFFSET
    try:
        return date(year, month, day)
    except ValueError:
        return None


DATE_RULES: tuple[DateRule, ...] = (
    DateRule(
        "day_month_year",
        re.compile(r"(?<!\d)(\d{1,2})/(\d{1,2})/(\d{4})(?!\d)"),
        lambda m: _safe_date(int(m.group(3)), int(m.group(2)), int(m.group(1))),
    ),
    DateRule(
        "iso",
        re.compile(r"(?<!\d)(\d{4})-(\d{1,2})-(\d{1,2})(?!\d)"),
        lambda m: _safe_date(int(m.group(1)), int(m.group(2)), int(m.group(3))),
    ),
)

# Vendor phrase after a preposition: letters (Thai or Latin) and inner spaces, no digits
VENDOR_PATTERN = re.compile(
    r"(?:จาก|ร้าน|ที่)\s*([ก-๎A-Za-z][ก-๎A-Za-z ]*)"
)

CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule("ค่าไฟฟ้า", "utility", "electric"),
    CategoryRule("ค่าไฟ", "utility", "electric"),
    CategoryRule("ค่าน้ำประปา", "utility", "water"),
    CategoryRule("ค่าน้ำ", "utility", "water"),
    CategoryRule("ค่าน้ำมัน", "transport", "fuel"),
    CategoryRule("ค่าน้ำแข็ง", "ingredient", "ice"),
    CategoryRule("ค่าแก๊ส", "utility", "gas"),
    CategoryRule("ค่าโทรศัพท์", "utility", "phone"),
    CategoryRule("ค่าโทร", "utility", "phone"),
    CategoryRule("ค่าอินเทอร์เน็ต", "utility", "internet"),
    CategoryRule("ค่าเน็ต", "utility", "internet"),
    CategoryRule("ค่าเช่า", "rental"),
    CategoryRule("ค่าแรง", "labor"),
    CategoryRule("ค่าจ้าง", "labor"),
    CategoryRule("เงินเดือน", "labor", "salary"),
    CategoryRule("ค่าขนส่ง", "transport"),
    CategoryRule("ค่าส่ง", "transport"),
    CategoryRule("ซื้อ", "ingredient"),
    CategoryRule("electricity", "utility", "electric"),
    CategoryRule("water bill", "utility", "water"),
    CategoryRule("internet", "utility", "internet"),
    CategoryRule("rent", "rental"),
    CategoryRule("wage", "labor"),
    CategoryRule("salary", "labor", "salary"),
)

DEFAULT_CATEGORY = "other"

DEFAULT_DESCRIPTIONS: dict[str, str] = {
    "utility": "ค่าใช้จ่ายสาธารณูปโภค",
    "rental": "ค่าเช่า",
    "labor": "ค่าแรง",
    "ingredient": "ค่าวัตถุดิบ",
    "transport": "ค่าขนส่ง",
}
FALLBACK_DESCRIPTION = "ค่าใช้จ่ายอื่นๆ"

PAYMENT_METHOD_RULES: tuple[tuple[str, str], ...] = (
    ("โอน", "transfer"),
    ("transfer", "transfer"),
    ("พร้อมเพย์", "transfer"),
    ("promptpay", "transfer"),
    ("บัตร", "card"),
    ("card", "card"),
)
DEFAULT_PAYMENT_METHOD = "cash"
