"""Expense models: extracted candidates, stored records, and pipeline outcomes."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ExtractedExpense(BaseModel):
    """A candidate expense parsed from one chat message. Never persisted as-is."""

    model_config = ConfigDict(frozen=True)

    amount: Decimal = Field(gt=0)
    category: str = "other"
    subcategory: str | None = None
    description: str = Field(min_length=1, max_length=200)
    expense_date: date | None = None
    vendor: str | None = None
    payment_method: str = "cash"
    original_message: str


class StoredExpenseRecord(BaseModel):
    """An expense row as returned by the store."""

    model_config = ConfigDict(extra="ignore")

    id: int | str
    amount: Decimal
    category: str | None = "other"
    subcategory: str | None = None
    description: str | None = ""
    expense_date: date
    vendor: str | None = None
    payment_method: str | None = "cash"
    user_id: str | None = None
    notes: str | None = None
    status: str | None = None
    created_at: datetime | None = None

    @field_validator("id")
    @classmethod
    def _id_not_blank(cls, value: int | str) -> int | str:
        if isinstance(value, str) and not value.strip():
            raise ValueError("record id must not be blank")
        return value


class DuplicateMatch(BaseModel):
    """An existing record judged to describe the same expense as a candidate."""

    existing_record: StoredExpenseRecord
    similarity: float = Field(ge=0.0, le=1.0)


class ExpenseStatus(str, Enum):
    """Result of running one message through the persist-then-confirm pipeline."""

    NOT_EXPENSE = "not_expense"
    DUPLICATE = "duplicate"
    RECORDED = "recorded"
    FAILED = "failed"  # Attempted, unconfirmed


class ExpenseOutcome(BaseModel):
    status: ExpenseStatus
    expense: ExtractedExpense | None = None
    record: StoredExpenseRecord | None = None
    duplicate: DuplicateMatch | None = None

    @property
    def is_confirmed(self) -> bool:
        """True only when a confirmation may be shown to the chat user."""
        if self.status is ExpenseStatus.RECORDED:
            return self.record is not None
        if self.status is ExpenseStatus.DUPLICATE:
            return self.duplicate is not None
        return False
