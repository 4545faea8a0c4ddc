from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from finance_tracker.core.security import get_current_user, get_db
from finance_tracker.db import store
from finance_tracker.models.savings_goal import (
    GoalProgressUpdate,
    SavingsGoalCreate,
    SavingsGoalPublic,
    SavingsGoalUpdate,
)
from finance_tracker.models.user import CurrentUser
from finance_tracker.utils.analyzer import DashboardAnalyzer
from finance_tracker.utils.periods import get_today

router = APIRouter()
analyzer = DashboardAnalyzer()


@router.get("", response_model=List[SavingsGoalPublic])
def list_savings_goals(
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    return [analyzer.with_progress(goal) for goal in store.list_savings_goals(db, user.id)]


@router.get("/{goal_id}", response_model=SavingsGoalPublic)
def get_savings_goal(
    goal_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    goal = store.get_savings_goal(db, user.id, goal_id)
    if not goal:
        raise HTTPException(status_code=404, detail="Savings goal not found")
    return analyzer.with_progress(goal)


@router.post("", response_model=SavingsGoalPublic, status_code=status.HTTP_201_CREATED)
def create_savings_goal(
    goal: SavingsGoalCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(get_today),
):
    if goal.end_date < today:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    values = goal.model_dump(mode="json")
    values["start_date"] = today.isoformat()
    return analyzer.with_progress(store.create_savings_goal(db, user.id, values))


@router.put("/{goal_id}", response_model=SavingsGoalPublic)
def update_savings_goal(
    goal_id: str,
    goal_update: SavingsGoalUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    mutable_fields = goal_update.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    if "start_date" in mutable_fields or "end_date" in mutable_fields:
        existing = store.get_savings_goal(db, user.id, goal_id)
        if not existing:
            raise HTTPException(status_code=404, detail="Savings goal not found")
        # One-sided updates are checked against the stored counterpart.
        start = str(mutable_fields.get("start_date", existing.get("start_date")))[:10]
        end = str(mutable_fields.get("end_date", existing.get("end_date")))[:10]
        if end < start:
            raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    updated = store.update_savings_goal(db, user.id, goal_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Savings goal not found")
    return analyzer.with_progress(updated)


@router.delete("/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_savings_goal(
    goal_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    deleted = store.delete_savings_goal(db, user.id, goal_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Savings goal not found")
    return None


@router.post("/{goal_id}/progress", response_model=SavingsGoalPublic)
def update_goal_progress(
    goal_id: str,
    progress: GoalProgressUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    updated = store.add_goal_progress(db, user.id, goal_id, progress.amount)
    if not updated:
        raise HTTPException(status_code=404, detail="Savings goal not found")
    return analyzer.with_progress(updated)
