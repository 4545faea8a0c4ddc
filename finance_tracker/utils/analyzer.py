from __future__ import annotations

import math
from collections import defaultdict
from dataclasses import dataclass, asdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Tuple

from finance_tracker.models.enums import EntryType
from finance_tracker.utils.periods import month_label

UNCATEGORIZED_NAME = "Uncategorized"
UNCATEGORIZED_COLOR = "#9ca3af"


@dataclass
class CategoryTotal:
    """Running total for one category in a breakdown."""

    id: Optional[str]
    name: str
    color: str
    total: float = 0.0
    percentage: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_amount(row: Dict[str, Any]) -> float:
    # Postgres numeric columns may come back as strings.
    value = row.get("amount")
    if value in (None, ""):
        return 0.0
    return float(value)


def parse_date(value: Any) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def embedded_category(row: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    category = row.get("categories", row.get("category"))
    if isinstance(category, list):
        category = category[0] if category else None
    return category or None


class DashboardAnalyzer:
    """
    In-memory reductions behind the dashboard: summary totals, monthly
    buckets, category breakdowns and savings goal progress. Works on the
    plain row dicts returned by the Supabase client.
    """

    def __init__(self, precision: int = 2) -> None:
        self._precision = precision

    def _round(self, value: float) -> float:
        return round(value, self._precision)

    def filter(
        self,
        transactions: Iterable[Dict[str, Any]],
        entry_type: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[Dict[str, Any]]:
        selected = []
        for row in transactions:
            if entry_type and row.get("type") != entry_type:
                continue
            if start_date or end_date:
                row_date = parse_date(row["transaction_date"])
                if start_date and row_date < start_date:
                    continue
                if end_date and row_date > end_date:
                    continue
            selected.append(row)
        return selected

    def totals(self, transactions: Iterable[Dict[str, Any]]) -> Tuple[float, float]:
        income = 0.0
        expense = 0.0
        for row in transactions:
            if row.get("type") == EntryType.INCOME:
                income += parse_amount(row)
            else:
                expense += parse_amount(row)
        return income, expense

    def summary(
        self,
        transactions: List[Dict[str, Any]],
        start_date: date,
        end_date: date,
    ) -> Dict[str, Any]:
        """Income, expense and balance for rows dated within [start_date, end_date]."""
        income, expense = self.totals(self.filter(transactions, start_date=start_date, end_date=end_date))
        return {
            "total_income": self._round(income),
            "total_expense": self._round(expense),
            "balance": self._round(income - expense),
            "start_date": start_date.isoformat(),
            "end_date": end_date.isoformat(),
        }

    @staticmethod
    def profit_ratio(summary: Dict[str, Any]) -> int:
        """Whole-percent share of income left after expenses."""
        income = summary.get("total_income", 0)
        if income <= 0:
            return 0
        # Halves round up, toward positive infinity.
        return math.floor(summary.get("balance", 0) / income * 100 + 0.5)

    def monthly_totals(self, transactions: List[Dict[str, Any]], year: int) -> Dict[str, Any]:
        income_data = [0.0] * 12
        expense_data = [0.0] * 12
        for row in transactions:
            row_date = parse_date(row["transaction_date"])
            if row_date.year != year:
                continue
            if row.get("type") == EntryType.INCOME:
                income_data[row_date.month - 1] += parse_amount(row)
            else:
                expense_data[row_date.month - 1] += parse_amount(row)
        return {
            "year": year,
            "income_data": [self._round(v) for v in income_data],
            "expense_data": [self._round(v) for v in expense_data],
        }

    def monthly_trends(
        self,
        transactions: List[Dict[str, Any]],
        months: List[Tuple[int, int]],
    ) -> List[Dict[str, Any]]:
        """One income/expense/balance entry per requested (year, month), in order."""
        buckets: Dict[Tuple[int, int], List[float]] = defaultdict(lambda: [0.0, 0.0])
        for row in transactions:
            row_date = parse_date(row["transaction_date"])
            bucket = buckets[(row_date.year, row_date.month)]
            if row.get("type") == EntryType.INCOME:
                bucket[0] += parse_amount(row)
            else:
                bucket[1] += parse_amount(row)

        trends = []
        for year, month in months:
            income, expense = buckets.get((year, month), (0.0, 0.0))
            trends.append({
                "month": month_label(month),
                "year": year,
                "income": self._round(income),
                "expense": self._round(expense),
                "balance": self._round(income - expense),
            })
        return trends

    def category_breakdown(self, transactions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Group rows by their embedded category and normalise each total to a
        percentage of the grand total. Largest categories come first.
        """
        groups: Dict[Optional[str], CategoryTotal] = {}
        grand_total = 0.0
        for row in transactions:
            amount = parse_amount(row)
            grand_total += amount
            category = embedded_category(row)
            key = category.get("id") if category else None
            if key not in groups:
                if category:
                    groups[key] = CategoryTotal(
                        id=key,
                        name=category.get("name") or UNCATEGORIZED_NAME,
                        color=category.get("color") or UNCATEGORIZED_COLOR,
                    )
                else:
                    groups[key] = CategoryTotal(id=None, name=UNCATEGORIZED_NAME, color=UNCATEGORIZED_COLOR)
            groups[key].total += amount

        for group in groups.values():
            group.percentage = self._round(group.total / grand_total * 100) if grand_total > 0 else 0.0
            group.total = self._round(group.total)

        ordered = sorted(groups.values(), key=lambda g: g.total, reverse=True)
        return [group.to_dict() for group in ordered]

    def goal_progress(self, goal: Dict[str, Any]) -> float:
        target = float(goal.get("target_amount") or 0)
        if target <= 0:
            return 0.0
        current = float(goal.get("current_amount") or 0)
        return self._round(max(0.0, min(100.0, current / target * 100)))

    def with_progress(self, goal: Dict[str, Any]) -> Dict[str, Any]:
        return {**goal, "progress_percentage": self.goal_progress(goal)}
