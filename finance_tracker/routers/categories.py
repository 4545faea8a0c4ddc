from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from finance_tracker.core.security import get_current_user, get_db
from finance_tracker.db import store
from finance_tracker.models.category import CategoryCreate, CategoryPublic, CategoryUpdate
from finance_tracker.models.enums import EntryType
from finance_tracker.models.user import CurrentUser

router = APIRouter()


@router.get("", response_model=List[CategoryPublic])
def list_categories(
    type: Optional[EntryType] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    return store.list_categories(db, user.id, entry_type=type)


@router.get("/{category_id}", response_model=CategoryPublic)
def get_category(
    category_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    category = store.get_category(db, user.id, category_id)
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


@router.post("", response_model=CategoryPublic, status_code=status.HTTP_201_CREATED)
def create_category(
    category: CategoryCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    return store.create_category(db, user.id, category.model_dump(mode="json"))


@router.put("/{category_id}", response_model=CategoryPublic)
def update_category(
    category_id: str,
    category_update: CategoryUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    mutable_fields = category_update.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update_category(db, user.id, category_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Category not found")
    return updated


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    try:
        deleted = store.delete_category(db, user.id, category_id)
    except store.CategoryInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Category not found")
    return None
