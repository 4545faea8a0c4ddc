"""
Dashboard Router
Aggregated views over the caller's transactions: current-month summary,
monthly buckets and trends, and category breakdowns.
"""
import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from supabase import Client

from finance_tracker.core.config import settings
from finance_tracker.core.security import get_current_user, get_db
from finance_tracker.db import store
from finance_tracker.models.dashboard import (
    CategoryBreakdown,
    DashboardData,
    DashboardSummary,
    MonthlyTotals,
    MonthlyTrend,
)
from finance_tracker.models.enums import EntryType, Period
from finance_tracker.models.user import CurrentUser
from finance_tracker.utils import periods
from finance_tracker.utils.analyzer import DashboardAnalyzer

router = APIRouter()
logger = logging.getLogger(__name__)
analyzer = DashboardAnalyzer()


def _summary(transactions, start_date: date, end_date: date) -> dict:
    summary = analyzer.summary(transactions, start_date, end_date)
    summary["profit_ratio"] = analyzer.profit_ratio(summary)
    return summary


def _year_or_current(year: Optional[int], today: date) -> int:
    return year if year is not None else today.year


@router.get("/summary", response_model=DashboardSummary)
def dashboard_summary(
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(periods.get_today),
):
    """Income, expense, balance and profit ratio for the current calendar month."""
    start_date, end_date = periods.current_month(today)
    transactions = store.list_transactions(db, user.id, start_date=start_date, end_date=end_date)
    return _summary(transactions, start_date, end_date)


@router.get("/monthly", response_model=MonthlyTotals)
def monthly_totals(
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(periods.get_today),
):
    """Twelve income and expense buckets for a year, indexed by month."""
    year = _year_or_current(year, today)
    start_date, end_date = periods.year_bounds(year)
    transactions = store.list_transactions(db, user.id, start_date=start_date, end_date=end_date)
    return analyzer.monthly_totals(transactions, year)


@router.get("/trends", response_model=List[MonthlyTrend])
def monthly_trends(
    year: Optional[int] = Query(default=None, ge=1900, le=9999),
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(periods.get_today),
):
    year = _year_or_current(year, today)
    start_date, end_date = periods.year_bounds(year)
    transactions = store.list_transactions(db, user.id, start_date=start_date, end_date=end_date)
    return analyzer.monthly_trends(transactions, [(year, month) for month in range(1, 13)])


@router.get("/breakdown", response_model=List[CategoryBreakdown])
def category_breakdown(
    type: EntryType = EntryType.EXPENSE,
    period: Period = Period.MONTH,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(periods.get_today),
):
    """Per-category totals and percentages from the start of the period through today."""
    start_date, end_date = periods.period_bounds(period, today)
    transactions = store.list_transactions(
        db, user.id, start_date=start_date, end_date=end_date, entry_type=type
    )
    return analyzer.category_breakdown(transactions)


@router.get("", response_model=DashboardData)
def dashboard_data(
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(periods.get_today),
):
    """
    Everything the dashboard page shows in one call. Transactions for the
    trailing trend window are fetched once and reduced in memory.
    """
    months = periods.trailing_months(today, settings.TREND_MONTHS)
    if not months:
        raise HTTPException(status_code=500, detail="TREND_MONTHS must be at least 1")

    window_start, _ = periods.month_bounds(*months[0])
    month_start, month_end = periods.current_month(today)
    transactions = store.list_transactions(db, user.id, start_date=window_start, end_date=month_end)
    logger.info(f"Dashboard for user {user.id}: {len(transactions)} transactions since {window_start}")

    month_expenses = analyzer.filter(
        transactions, entry_type=EntryType.EXPENSE, start_date=month_start, end_date=today
    )
    recent = store.list_transactions(db, user.id, limit=settings.RECENT_TRANSACTIONS_LIMIT)
    goals = store.list_savings_goals(db, user.id)

    return {
        "summary": _summary(transactions, month_start, month_end),
        "category_breakdown": analyzer.category_breakdown(month_expenses),
        "recent_transactions": recent,
        "savings_goals": [analyzer.with_progress(goal) for goal in goals],
        "monthly_trends": analyzer.monthly_trends(transactions, months),
    }
