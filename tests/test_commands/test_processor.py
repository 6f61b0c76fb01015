"""Tests for wake-word detection and command routing."""

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from expense_bot.commands import has_wake_word, process_command, resolve_route, strip_wake_word
from expense_bot.commands.processor import normalize_command
from expense_bot.messages import ACKNOWLEDGED_TEXT, HELP_TEXT

TODAY = date(2025, 1, 10)


@pytest.mark.parametrize("text", ["พอส สต็อก", "เฮ้ พอส", "พอส"])
def test_has_wake_word(text):
    assert has_wake_word(text, "พอส")


def test_has_wake_word_is_case_insensitive():
    assert has_wake_word("Hey BOT stock", "bot")


def test_no_wake_word():
    assert not has_wake_word("ค่าไฟ 500 บาท", "พอส")


def test_empty_wake_word_never_matches():
    assert not has_wake_word("anything", "")


@pytest.mark.parametrize(
    ("text", "command"),
    [
        ("พอส สต็อก", "สต็อก"),
        ("พอสสต็อก", "สต็อก"),
        ("  พอส   ค่าใช้จ่ายวันนี้ ", "ค่าใช้จ่ายวันนี้"),
        ("BOT Stock", "Stock"),
    ],
)
def test_strip_wake_word(text, command):
    wake_word = "bot" if "BOT" in text else "พอส"
    assert strip_wake_word(text, wake_word) == command


@pytest.mark.parametrize("command", ["สต็อก", "  สต็อก  ", "STOCK", "Stock please", "สินค้า"])
def test_stock_route_regardless_of_case_and_spacing(command):
    route = resolve_route(normalize_command(command))
    assert route.name == "stock"


@pytest.mark.parametrize(
    ("command", "name"),
    [
        ("ค่าใช้จ่ายวันนี้", "expense_today"),
        ("ค่าใช้จ่ายสัปดาห์", "expense_week"),
        ("ค่าใช้จ่ายเดือน", "expense_month"),
        ("ลบรายการล่าสุด", "delete_latest"),
        ("สถิติ", "statistics"),
        ("expense   week", "expense_week"),
    ],
)
def test_routes(command, name):
    assert resolve_route(normalize_command(command)).name == name


def test_unknown_command_has_no_route():
    assert resolve_route("ทำอะไรอยู่") is None


@pytest.mark.parametrize("command", ["", "help", "HELP", "ช่วย", "คำสั่ง"])
async def test_help_commands(command, store, settings):
    assert await process_command(command, store, settings, TODAY) == HELP_TEXT


async def test_unknown_command_is_acknowledged(store, settings):
    assert await process_command("ทำอะไรอยู่", store, settings, TODAY) == ACKNOWLEDGED_TEXT


async def test_stock_command_dispatches_to_low_stock(store, settings):
    with patch(
        "expense_bot.commands.processor.low_stock_summary", new_callable=AsyncMock
    ) as mock_stock:
        mock_stock.return_value = "stock reply"
        reply = await process_command(" สต็อก ", store, settings, TODAY)

    assert reply == "stock reply"
    mock_stock.assert_called_once_with(store, settings)
