"""Fuzzy duplicate detection for expenses against recently stored records.

A candidate is a duplicate of an existing record when all three gates pass,
checked cheapest first:

1. amount within a fixed tolerance
2. description similarity at or above a threshold
3. business dates within a few days of each other

This is a best-effort heuristic, not a uniqueness constraint. Two messages
for the same expense that arrive concurrently can both pass the check
before either is inserted.
"""

import logging
from datetime import date
from decimal import Decimal

from rapidfuzz.distance import Levenshtein

from expense_bot.clock import days_ago
from expense_bot.config import Settings
from expense_bot.models.expense import DuplicateMatch, ExtractedExpense, StoredExpenseRecord
from expense_bot.store.client import RecordStore
from expense_bot.store.expenses import query_expenses_since

logger = logging.getLogger(__name__)

# Shorter description must be at least this long to count as contained in the longer one
_MIN_CONTAINED_LENGTH = 4


def levenshtein(a: str, b: str) -> int:
    """Minimum single-character insertions, deletions, and substitutions from a to b."""
    return Levenshtein.distance(a, b)


def similarity(a: str, b: str) -> float:
    """Normalized edit similarity: 1 - distance / max(len(a), len(b)).

    Identical strings (including two empty strings) score 1.0; a non-empty
    string against an empty one scores 0.0.
    """
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def description_score(a: str, b: str) -> float:
    """Similarity of two descriptions, case-insensitive.

    A description fully contained in the other ("ค่าน้ำ" in "ค่าน้ำประปา")
    scores 1.0, provided the shorter one is long enough to be meaningful.
    """
    a = " ".join(a.lower().split())
    b = " ".join(b.lower().split())
    shorter, longer = sorted((a, b), key=len)
    if len(shorter) >= _MIN_CONTAINED_LENGTH and shorter in longer:
        return 1.0
    return similarity(a, b)


def find_duplicate(
    candidate: ExtractedExpense,
    existing: list[StoredExpenseRecord],
    *,
    today: date,
    amount_tolerance: Decimal = Decimal("10"),
    similarity_threshold: float = 0.7,
    max_days_apart: int = 3,
) -> DuplicateMatch | None:
    """Return the first existing record (in the given order) matching the candidate."""
    candidate_date = candidate.expense_date or today

    for record in existing:
        if abs(record.amount - candidate.amount) > amount_tolerance:
            continue

        score = description_score(candidate.description, record.description or "")
        if score < similarity_threshold:
            continue

        if abs((record.expense_date - candidate_date).days) > max_days_apart:
            continue

        return DuplicateMatch(existing_record=record, similarity=score)

    return None


async def check_duplicate(
    store: RecordStore, settings: Settings, candidate: ExtractedExpense, today: date
) -> DuplicateMatch | None:
    """Query the trailing lookback window and look for a duplicate of the candidate.

    Lets StoreError propagate: without a completed check the caller must not insert.
    """
    recent = await query_expenses_since(
        store,
        settings,
        since=days_ago(today, settings.duplicate_lookback_days),
        limit=settings.duplicate_query_limit,
    )
    match = find_duplicate(
        candidate,
        recent,
        today=today,
        amount_tolerance=settings.amount_tolerance,
        similarity_threshold=settings.similarity_threshold,
        max_days_apart=settings.duplicate_max_days_apart,
    )
    if match is not None:
        logger.info(
            "Duplicate expense found",
            extra={
                "existing_id": str(match.existing_record.id),
                "similarity": round(match.similarity, 3),
            },
        )
    return match
