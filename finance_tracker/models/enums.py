"""
Shared enumerations for request and response models.

StrEnum values compare equal to their string equivalents, so rows read back
from Supabase (plain strings) can be compared directly, e.g.
``row["type"] == EntryType.INCOME``.
"""

from __future__ import annotations

from enum import StrEnum


class EntryType(StrEnum):
    """Whether a transaction or category records money coming in or going out."""

    INCOME = "income"
    EXPENSE = "expense"


class Period(StrEnum):
    """Reporting windows for category breakdowns."""

    MONTH = "month"
    YEAR = "year"
