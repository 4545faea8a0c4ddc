from pydantic import BaseModel, Field
from typing import Optional

from finance_tracker.models.enums import EntryType

DEFAULT_CATEGORY_COLOR = "#6366f1"


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    type: EntryType
    color: str = DEFAULT_CATEGORY_COLOR


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    type: Optional[EntryType] = None
    color: Optional[str] = None


class CategoryPublic(BaseModel):
    id: str
    name: str
    type: EntryType
    color: str = DEFAULT_CATEGORY_COLOR
    created_at: Optional[str] = None
