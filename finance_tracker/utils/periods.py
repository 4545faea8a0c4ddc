"""
Calendar helpers for dashboard date ranges.

All bounds are inclusive ``date`` pairs, matching how transactions are
filtered with ``gte``/``lte`` on ``transaction_date``.
"""
from __future__ import annotations

import calendar
from datetime import date
from typing import List, Tuple

from finance_tracker.models.enums import Period

# Fixed English labels; calendar.month_abbr follows the process locale.
MONTH_LABELS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def current_month(today: date) -> Tuple[date, date]:
    return month_bounds(today.year, today.month)


def year_bounds(year: int) -> Tuple[date, date]:
    return date(year, 1, 1), date(year, 12, 31)


def period_bounds(period: str, today: date) -> Tuple[date, date]:
    """
    Start of the period through ``today``. ``month`` starts on the first of
    the current month, ``year`` on 1 January.
    """
    period = Period(period)
    if period == Period.MONTH:
        return date(today.year, today.month, 1), today
    return date(today.year, 1, 1), today


def shift_month(year: int, month: int, offset: int) -> Tuple[int, int]:
    index = year * 12 + (month - 1) + offset
    return index // 12, index % 12 + 1


def trailing_months(today: date, count: int) -> List[Tuple[int, int]]:
    """``count`` (year, month) pairs ending with the month of ``today``, oldest first."""
    if count < 1:
        return []
    return [shift_month(today.year, today.month, -offset) for offset in range(count - 1, -1, -1)]


def month_label(month: int) -> str:
    return MONTH_LABELS[month - 1]


def get_today() -> date:
    """Request-scoped "today"; routers take it as a dependency."""
    return date.today()
