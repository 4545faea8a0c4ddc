import logging
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from supabase import Client

from finance_tracker.core.security import get_current_user, get_db
from finance_tracker.db import store
from finance_tracker.models.enums import EntryType
from finance_tracker.models.transaction import TransactionCreate, TransactionPublic, TransactionUpdate
from finance_tracker.models.user import CurrentUser
from finance_tracker.utils.periods import get_today

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=List[TransactionPublic])
def list_transactions(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    type: Optional[EntryType] = None,
    category_id: Optional[str] = None,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    return store.list_transactions(
        db,
        user.id,
        start_date=start_date,
        end_date=end_date,
        entry_type=type,
        category_id=category_id,
    )


@router.get("/{transaction_id}", response_model=TransactionPublic)
def get_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    transaction = store.get_transaction(db, user.id, transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return transaction


@router.post("", response_model=TransactionPublic, status_code=status.HTTP_201_CREATED)
def create_transaction(
    transaction: TransactionCreate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
    today: date = Depends(get_today),
):
    values = transaction.model_dump(mode="json", exclude={"savings_goal_id"})
    if transaction.transaction_date is None:
        values["transaction_date"] = today.isoformat()
    created = store.create_transaction(db, user.id, values)

    # Expenses tagged with a goal count toward that goal's progress.
    if transaction.type == EntryType.EXPENSE and transaction.savings_goal_id:
        try:
            goal = store.add_goal_progress(db, user.id, transaction.savings_goal_id, transaction.amount)
        except store.StoreError as e:
            # The transaction row is already written; report it as created.
            logger.error(
                f"Transaction {created.get('id')} saved but savings goal "
                f"{transaction.savings_goal_id} was not updated: {str(e)}"
            )
            return created
        if goal is None:
            logger.warning(
                f"Transaction {created.get('id')} references unknown savings goal "
                f"{transaction.savings_goal_id}"
            )

    return created


@router.put("/{transaction_id}", response_model=TransactionPublic)
def update_transaction(
    transaction_id: str,
    transaction_update: TransactionUpdate,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    mutable_fields = transaction_update.model_dump(mode="json", exclude_unset=True, exclude_none=True)
    if not mutable_fields:
        raise HTTPException(status_code=400, detail="No fields to update")

    updated = store.update_transaction(db, user.id, transaction_id, mutable_fields)
    if not updated:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return updated


@router.delete("/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(
    transaction_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: Client = Depends(get_db),
):
    deleted = store.delete_transaction(db, user.id, transaction_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Transaction not found")
    return None
