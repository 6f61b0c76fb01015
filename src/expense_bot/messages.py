"""Thai reply texts for the LINE chat.

User-facing failures are short and never include internal error detail.
"""

from collections.abc import Iterable
from decimal import Decimal

from expense_bot.models.expense import ExtractedExpense, StoredExpenseRecord
from expense_bot.models.inventory import InventoryItem

ITEM_PREVIEW_LIMIT = 5
STOCK_PREVIEW_LIMIT = 10

HELP_TEXT = (
    "🤖 พอส Bot - ผู้ช่วยบันทึกค่าใช้จ่าย\n\n"
    "📋 คำสั่งที่ใช้ได้:\n"
    '• "พอส" - ดูคำสั่งทั้งหมด\n'
    '• "พอส ค่าใช้จ่ายวันนี้" - ดูค่าใช้จ่ายวันนี้\n'
    '• "พอส ค่าใช้จ่ายสัปดาห์" - ดูค่าใช้จ่าย 7 วันล่าสุด\n'
    '• "พอส ค่าใช้จ่ายเดือน" - ดูค่าใช้จ่าย 30 วันล่าสุด\n'
    '• "พอส สต็อก" - ดูสต็อกที่ใกล้หมด\n'
    '• "พอส สถิติ" - ดูสถิติค่าใช้จ่าย\n'
    '• "พอส ลบรายการล่าสุด" - ลบค่าใช้จ่ายที่บันทึกล่าสุด\n\n'
    "💡 หมายเหตุ: พอสจะบันทึกค่าใช้จ่ายอัตโนมัติโดยไม่ต้องเรียก"
)
ACKNOWLEDGED_TEXT = '✅ รับคำสั่งแล้ว\nพิมพ์ "พอส help" เพื่อดูคำสั่งทั้งหมด'
COMMAND_ERROR_TEXT = "เกิดข้อผิดพลาดในการประมวลผลคำสั่ง"
FETCH_ERROR_TEXT = "❌ ไม่สามารถดึงข้อมูลได้"
DELETE_ERROR_TEXT = "❌ เกิดข้อผิดพลาดในการลบรายการ"
NOTHING_TO_DELETE_TEXT = "ℹ️ ไม่พบรายการล่าสุดที่สามารถลบได้"
STOCK_OK_TEXT = "✅ สต็อกทั้งหมดเพียงพอ\nไม่มีรายการใกล้หมด"

PERIOD_NAMES = {
    "today": "วันนี้",
    "week": "สัปดาห์นี้",
    "month": "เดือนนี้",
}


def format_baht(amount: Decimal | float) -> str:
    """Format an amount as ``฿1250`` or ``฿1250.50``; no thousands separators."""
    value = Decimal(str(amount)).quantize(Decimal("0.01"))
    if value == value.to_integral_value():
        return f"฿{value:.0f}"
    return f"฿{value:.2f}"


def _format_quantity(value: float) -> str:
    return f"{value:g}"


def recorded_text(expense: ExtractedExpense, record: StoredExpenseRecord) -> str:
    """Confirmation for a freshly stored expense."""
    when = expense.expense_date.isoformat() if expense.expense_date else "วันนี้"
    return (
        "✅ บันทึกค่าใช้จ่ายเรียบร้อย\n"
        f"📋 {record.description or expense.description}\n"
        f"💰 {format_baht(record.amount)}\n"
        f"📅 {when}\n"
        "(บันทึกอัตโนมัติ)"
    )


def duplicate_text(existing: StoredExpenseRecord) -> str:
    """Notice that a similar expense already exists and nothing was written."""
    return (
        "ℹ️ พบค่าใช้จ่ายที่คล้ายกันอยู่แล้ว\n"
        f"📋 {existing.description or '-'}\n"
        f"💰 {format_baht(existing.amount)}\n"
        f"📅 {existing.expense_date.isoformat()}\n"
        "(ไม่บันทึกซ้ำ)"
    )


def expense_summary_text(period: str, records: list[StoredExpenseRecord]) -> str:
    total = sum((r.amount for r in records), Decimal("0"))
    lines = [
        f"📊 ค่าใช้จ่าย{PERIOD_NAMES[period]}",
        "",
        f"💰 รวม: {format_baht(total)}",
        f"📋 จำนวนรายการ: {len(records)}",
    ]
    if records:
        lines += ["", "รายการล่าสุด:"]
        for i, record in enumerate(records[:ITEM_PREVIEW_LIMIT], start=1):
            lines.append(f"{i}. {record.description or '-'} {format_baht(record.amount)}")
        if len(records) > ITEM_PREVIEW_LIMIT:
            lines.append(f"... และอีก {len(records) - ITEM_PREVIEW_LIMIT} รายการ")
    return "\n".join(lines)


def low_stock_text(items: list[InventoryItem]) -> str:
    if not items:
        return STOCK_OK_TEXT
    lines = [f"📦 สต็อกใกล้หมด ({len(items)} รายการ)", ""]
    for i, item in enumerate(items[:STOCK_PREVIEW_LIMIT], start=1):
        unit = item.unit or ""
        lines.append(f"{i}. {item.name}")
        lines.append(
            f"   สต็อก: {_format_quantity(item.current_stock)} {unit} "
            f"(ขั้นต่ำ: {_format_quantity(item.min_stock)} {unit})".rstrip()
        )
    if len(items) > STOCK_PREVIEW_LIMIT:
        lines.append(f"... และอีก {len(items) - STOCK_PREVIEW_LIMIT} รายการ")
    return "\n".join(lines)


def statistics_text(
    total: Decimal, count: int, by_category: Iterable[tuple[str, Decimal]]
) -> str:
    lines = [
        "📊 สถิติค่าใช้จ่าย (30 วัน)",
        "",
        f"💰 รวม: {format_baht(total)}",
        f"📋 จำนวนรายการ: {count}",
    ]
    breakdown = list(by_category)
    if breakdown:
        lines += ["", "ตามหมวดหมู่:"]
        for category, amount in breakdown:
            percent = amount / total * 100 if total else Decimal("0")
            lines.append(f"• {category}: {format_baht(amount)} ({percent:.1f}%)")
    return "\n".join(lines)


def deleted_text(record: StoredExpenseRecord) -> str:
    return (
        "✅ ลบรายการล่าสุดเรียบร้อย\n"
        f"{record.description or 'รายการค่าใช้จ่าย'} {format_baht(record.amount)}"
    )
