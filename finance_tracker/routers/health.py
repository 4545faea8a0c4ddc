"""
Health Check Router
Liveness and Supabase connectivity endpoints
"""
from fastapi import APIRouter
from datetime import datetime, timezone
import logging

from finance_tracker.core.config import settings
from finance_tracker.db import store

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
async def health_check():
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }


@router.get("/status")
def supabase_status():
    """
    Check that Supabase answers queries for each table the API uses.
    Row level security may hide rows from the anonymous client; an empty
    result still counts as reachable.
    """
    status = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "supabase": {
            "connected": False,
            "url": settings.SUPABASE_URL,
            "tables": {},
            "error": None,
        },
    }
    supabase_status = status["supabase"]

    try:
        client = store.get_supabase()
    except RuntimeError as e:
        supabase_status["error"] = str(e)
        logger.error(f"Supabase status check failed: {str(e)}")
        status["overall_status"] = "degraded"
        return status

    for table in (store.TRANSACTIONS_TABLE, store.CATEGORIES_TABLE, store.SAVINGS_GOALS_TABLE):
        try:
            client.table(table).select("id").limit(1).execute()
            supabase_status["tables"][table] = {"status": "accessible"}
        except Exception as e:
            supabase_status["tables"][table] = {"status": "error", "error": str(e)}
            logger.error(f"Supabase table check failed for {table}: {str(e)}")

    supabase_status["connected"] = all(
        table["status"] == "accessible" for table in supabase_status["tables"].values()
    )
    status["overall_status"] = "healthy" if supabase_status["connected"] else "degraded"
    return status
