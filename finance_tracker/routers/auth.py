from fastapi import APIRouter, Depends

from finance_tracker.core.security import get_current_user
from finance_tracker.models.user import CurrentUser, UserPublic

router = APIRouter()


@router.get("/me", response_model=UserPublic)
def get_me(user: CurrentUser = Depends(get_current_user)):
    """Get the profile of the user the bearer token belongs to"""
    return UserPublic(id=user.id, email=user.email, created_at=user.created_at)
