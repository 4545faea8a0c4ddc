from pydantic import BaseModel, EmailStr, Field
from typing import Optional


class CurrentUser(BaseModel):
    """Authenticated caller, resolved from a Supabase access token."""

    id: str
    email: Optional[EmailStr] = None
    created_at: Optional[str] = None
    access_token: str = Field(default="", exclude=True, repr=False)


class UserPublic(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    created_at: Optional[str] = None
