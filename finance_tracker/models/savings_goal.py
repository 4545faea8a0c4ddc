from datetime import date
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class SavingsGoalCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    target_amount: float = Field(gt=0)
    current_amount: float = Field(default=0.0, ge=0)
    end_date: date


class SavingsGoalUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    target_amount: Optional[float] = Field(default=None, gt=0)
    current_amount: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class GoalProgressUpdate(BaseModel):
    amount: float = Field(gt=0)


class SavingsGoalPublic(BaseModel):
    id: str
    name: str
    target_amount: float
    current_amount: float
    start_date: date
    end_date: date
    created_at: Optional[str] = None
    progress_percentage: float = 0.0
