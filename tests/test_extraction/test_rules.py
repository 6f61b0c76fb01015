"""Tests for the extraction rule tables."""

from datetime import date
from decimal import Decimal

import pytest

from expense_bot.extraction.rules import (
    AMOUNT_RULES,
    CATEGORY_RULES,
    DATE_RULES,
    DEFAULT_DESCRIPTIONS,
    parse_amount,
)


def _rule(rules, name):
    return next(rule for rule in rules if rule.name == name)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1,250.50", Decimal("1250.50")), ("3000", Decimal("3000")), ("12,000", Decimal("12000"))],
)
def test_parse_amount_strips_separators(raw, expected):
    assert parse_amount(raw) == expected


def test_amount_rules_are_ordered_most_specific_first():
    names = [rule.name for rule in AMOUNT_RULES]
    assert names[0] == "number_baht"
    assert names[-1] == "bare_number"


@pytest.mark.parametrize(
    ("name", "text", "number"),
    [
        ("number_baht", "500บาท", "500"),
        ("number_symbol", "60 ฿", "60"),
        ("symbol_number", "฿ 1,200", "1,200"),
        ("number_code", "45 thb", "45"),
        ("bare_number", "ราคา 99.5", "99.5"),
    ],
)
def test_amount_rule_matches(name, text, number):
    match = _rule(AMOUNT_RULES, name).pattern.search(text)
    assert match.group(1) == number


def test_day_month_year_rule_converts_buddhist_era():
    rule = _rule(DATE_RULES, "day_month_year")
    assert rule.to_date(rule.pattern.search("15/3/2567")) == date(2024, 3, 15)


def test_iso_rule_rejects_impossible_dates():
    rule = _rule(DATE_RULES, "iso")
    assert rule.to_date(rule.pattern.search("2025-13-01")) is None


def test_category_keywords_are_unique():
    keywords = [rule.keyword for rule in CATEGORY_RULES]
    assert len(keywords) == len(set(keywords))


def test_categories_with_defaults_are_mapped():
    categories = {rule.category for rule in CATEGORY_RULES}
    assert set(DEFAULT_DESCRIPTIONS) <= categories
