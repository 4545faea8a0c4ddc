"""
Supabase data access for transactions, categories and savings goals.

Every function takes the Supabase client and the id of the user the rows
belong to, and every query is scoped with ``user_id = <user>``. Lookups
return ``None`` (or ``False`` for deletes) when nothing matches; failures
reported by PostgREST are logged and re-raised as ``StoreError``.
"""
import logging
from datetime import date
from functools import lru_cache
from typing import Any, Dict, List, Optional

from postgrest.exceptions import APIError
from supabase import Client, create_client

from finance_tracker.core.config import settings

logger = logging.getLogger(__name__)

TRANSACTIONS_TABLE = "transactions"
CATEGORIES_TABLE = "categories"
SAVINGS_GOALS_TABLE = "savings_goals"

# Embeds the owning category on every transaction row.
TRANSACTION_COLUMNS = "*, categories (*)"


class StoreError(Exception):
    """Supabase rejected or failed a query."""


class CategoryInUseError(Exception):
    """A category cannot be deleted while transactions reference it."""


def create_supabase_client(access_token: Optional[str] = None) -> Client:
    """
    Build a Supabase client. When ``access_token`` is given, database calls
    run as that user so row level security applies.
    """
    if not settings.SUPABASE_URL:
        raise RuntimeError("SUPABASE_URL is not configured")
    if not settings.SUPABASE_ANON_KEY:
        raise RuntimeError("SUPABASE_ANON_KEY is not configured")

    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    if access_token:
        client.postgrest.auth(access_token)
    return client


@lru_cache()
def get_supabase() -> Client:
    """Shared anonymous client, used for token verification and health probes."""
    return create_supabase_client()


def _iso(value: Any) -> Any:
    return value.isoformat() if isinstance(value, date) else value


def _execute(query, operation: str):
    try:
        return query.execute()
    except APIError as e:
        logger.error(f"{operation} failed: {e.message}")
        raise StoreError(f"{operation} failed: {e.message}") from e


def _first(response) -> Optional[Dict[str, Any]]:
    return response.data[0] if response.data else None


# ----------------------------------------------------------------------
# Transactions
# ----------------------------------------------------------------------

def list_transactions(
    client: Client,
    user_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    entry_type: Optional[str] = None,
    category_id: Optional[str] = None,
    limit: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Transactions with their category, newest first. Date bounds are inclusive."""
    query = client.table(TRANSACTIONS_TABLE).select(TRANSACTION_COLUMNS).eq("user_id", user_id)

    if start_date:
        query = query.gte("transaction_date", _iso(start_date))
    if end_date:
        query = query.lte("transaction_date", _iso(end_date))
    if entry_type:
        query = query.eq("type", str(entry_type))
    if category_id:
        query = query.eq("category_id", category_id)

    query = query.order("transaction_date", desc=True)
    if limit:
        query = query.limit(limit)

    return _execute(query, "list_transactions").data or []


def get_transaction(client: Client, user_id: str, transaction_id: str) -> Optional[Dict[str, Any]]:
    response = _execute(
        client.table(TRANSACTIONS_TABLE)
        .select(TRANSACTION_COLUMNS)
        .eq("id", transaction_id)
        .eq("user_id", user_id)
        .limit(1),
        "get_transaction",
    )
    return _first(response)


def create_transaction(client: Client, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
    row = {**values, "user_id": user_id}
    response = _execute(client.table(TRANSACTIONS_TABLE).insert(row), "create_transaction")
    created = _first(response)
    if created is None:
        raise StoreError("create_transaction failed: no row returned")
    logger.info(f"Created transaction {created.get('id')} for user {user_id}")
    return created


def update_transaction(
    client: Client,
    user_id: str,
    transaction_id: str,
    updates: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    if not updates:
        return None
    response = _execute(
        client.table(TRANSACTIONS_TABLE)
        .update(updates)
        .eq("id", transaction_id)
        .eq("user_id", user_id),
        "update_transaction",
    )
    return _first(response)


def delete_transaction(client: Client, user_id: str, transaction_id: str) -> bool:
    response = _execute(
        client.table(TRANSACTIONS_TABLE)
        .delete()
        .eq("id", transaction_id)
        .eq("user_id", user_id),
        "delete_transaction",
    )
    return bool(response.data)


# ----------------------------------------------------------------------
# Categories
# ----------------------------------------------------------------------

def list_categories(client: Client, user_id: str, entry_type: Optional[str] = None) -> List[Dict[str, Any]]:
    query = client.table(CATEGORIES_TABLE).select("*").eq("user_id", user_id)
    if entry_type:
        query = query.eq("type", str(entry_type))
    return _execute(query.order("name"), "list_categories").data or []


def get_category(client: Client, user_id: str, category_id: str) -> Optional[Dict[str, Any]]:
    response = _execute(
        client.table(CATEGORIES_TABLE)
        .select("*")
        .eq("id", category_id)
        .eq("user_id", user_id)
        .limit(1),
        "get_category",
    )
    return _first(response)


def create_category(client: Client, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
    row = {**values, "user_id": user_id}
    created = _first(_execute(client.table(CATEGORIES_TABLE).insert(row), "create_category"))
    if created is None:
        raise StoreError("create_category failed: no row returned")
    logger.info(f"Created category {created.get('id')} for user {user_id}")
    return created


def update_category(
    client: Client,
    user_id: str,
    category_id: str,
    updates: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    if not updates:
        return None
    response = _execute(
        client.table(CATEGORIES_TABLE)
        .update(updates)
        .eq("id", category_id)
        .eq("user_id", user_id),
        "update_category",
    )
    return _first(response)


def delete_category(client: Client, user_id: str, category_id: str) -> bool:
    """Delete a category; raises CategoryInUseError if transactions still use it."""
    in_use = _execute(
        client.table(TRANSACTIONS_TABLE)
        .select("id")
        .eq("category_id", category_id)
        .eq("user_id", user_id)
        .limit(1),
        "delete_category",
    )
    if in_use.data:
        raise CategoryInUseError("Cannot delete category that has transactions")

    response = _execute(
        client.table(CATEGORIES_TABLE)
        .delete()
        .eq("id", category_id)
        .eq("user_id", user_id),
        "delete_category",
    )
    return bool(response.data)


# ----------------------------------------------------------------------
# Savings goals
# ----------------------------------------------------------------------

def list_savings_goals(client: Client, user_id: str) -> List[Dict[str, Any]]:
    """Goals ordered by deadline, soonest first."""
    query = client.table(SAVINGS_GOALS_TABLE).select("*").eq("user_id", user_id).order("end_date")
    return _execute(query, "list_savings_goals").data or []


def get_savings_goal(client: Client, user_id: str, goal_id: str) -> Optional[Dict[str, Any]]:
    response = _execute(
        client.table(SAVINGS_GOALS_TABLE)
        .select("*")
        .eq("id", goal_id)
        .eq("user_id", user_id)
        .limit(1),
        "get_savings_goal",
    )
    return _first(response)


def create_savings_goal(client: Client, user_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
    row = {**values, "user_id": user_id}
    created = _first(_execute(client.table(SAVINGS_GOALS_TABLE).insert(row), "create_savings_goal"))
    if created is None:
        raise StoreError("create_savings_goal failed: no row returned")
    logger.info(f"Created savings goal {created.get('id')} for user {user_id}")
    return created


def update_savings_goal(
    client: Client,
    user_id: str,
    goal_id: str,
    updates: Dict[str, Any],
) -> Optional[Dict[str, Any]]:
    if not updates:
        return None
    response = _execute(
        client.table(SAVINGS_GOALS_TABLE)
        .update(updates)
        .eq("id", goal_id)
        .eq("user_id", user_id),
        "update_savings_goal",
    )
    return _first(response)


def delete_savings_goal(client: Client, user_id: str, goal_id: str) -> bool:
    response = _execute(
        client.table(SAVINGS_GOALS_TABLE)
        .delete()
        .eq("id", goal_id)
        .eq("user_id", user_id),
        "delete_savings_goal",
    )
    return bool(response.data)


def add_goal_progress(
    client: Client,
    user_id: str,
    goal_id: str,
    amount: float,
) -> Optional[Dict[str, Any]]:
    """Add ``amount`` to a goal's ``current_amount`` and return the updated goal."""
    goal = get_savings_goal(client, user_id, goal_id)
    if goal is None:
        return None

    new_amount = round(float(goal.get("current_amount") or 0) + float(amount), 2)
    logger.info(f"Savings goal {goal_id}: current_amount -> {new_amount}")
    return update_savings_goal(client, user_id, goal_id, {"current_amount": new_amount})
