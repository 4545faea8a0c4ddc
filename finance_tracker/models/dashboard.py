from typing import List, Optional

from pydantic import BaseModel

from finance_tracker.models.savings_goal import SavingsGoalPublic
from finance_tracker.models.transaction import TransactionPublic


class DashboardSummary(BaseModel):
    total_income: float
    total_expense: float
    balance: float
    start_date: str
    end_date: str
    profit_ratio: int = 0


class MonthlyTotals(BaseModel):
    year: int
    income_data: List[float]
    expense_data: List[float]


class MonthlyTrend(BaseModel):
    month: str
    year: int
    income: float
    expense: float
    balance: float


class CategoryBreakdown(BaseModel):
    id: Optional[str] = None
    name: str
    color: str
    total: float
    percentage: float


class DashboardData(BaseModel):
    summary: DashboardSummary
    category_breakdown: List[CategoryBreakdown]
    recent_transactions: List[TransactionPublic]
    savings_goals: List[SavingsGoalPublic]
    monthly_trends: List[MonthlyTrend]
