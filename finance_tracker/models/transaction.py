from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from finance_tracker.models.category import CategoryPublic
from finance_tracker.models.enums import EntryType


class TransactionCreate(BaseModel):
    amount: float = Field(gt=0)
    type: EntryType
    category_id: str
    description: Optional[str] = ""
    # Defaults to the request's "today" when omitted.
    transaction_date: Optional[date] = None
    # Expense contributions toward a savings goal; not stored on the row.
    savings_goal_id: Optional[str] = None


class TransactionUpdate(BaseModel):
    amount: Optional[float] = Field(default=None, gt=0)
    type: Optional[EntryType] = None
    category_id: Optional[str] = None
    description: Optional[str] = None
    transaction_date: Optional[date] = None


class TransactionPublic(BaseModel):
    id: str
    amount: float
    type: EntryType
    category_id: Optional[str] = None
    description: Optional[str] = ""
    transaction_date: date
    created_at: Optional[str] = None
    category: Optional[CategoryPublic] = Field(
        default=None,
        validation_alias=AliasChoices("category", "categories"),
    )

    @field_validator("category", mode="before")
    @classmethod
    def unwrap_embedded_category(cls, value):
        # Embedded relations can come back as a one-element list.
        if isinstance(value, list):
            return value[0] if value else None
        return value
