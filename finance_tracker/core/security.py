"""
Request authentication against Supabase Auth.

Sign-up and sign-in happen in Supabase itself; the API only receives the
resulting access token as ``Authorization: Bearer <token>`` and asks
Supabase who it belongs to.
"""
import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from supabase import AuthApiError, AuthError, AuthRetryableError, Client

from finance_tracker.db import store
from finance_tracker.models.user import CurrentUser

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token required")
    return token


def _auth_unavailable(error: Exception) -> store.StoreError:
    # Surfaces as 502 through the StoreError handler.
    logger.error(f"Supabase Auth unavailable: {str(error)}")
    return store.StoreError(f"Authentication service unavailable: {str(error)}")


def get_current_user(authorization: Optional[str] = Header(None)) -> CurrentUser:
    """Resolve the bearer token to a Supabase user, or answer 401."""
    token = extract_bearer_token(authorization)
    try:
        response = store.get_supabase().auth.get_user(token)
    except RuntimeError:
        raise
    except AuthRetryableError as e:
        raise _auth_unavailable(e) from e
    except AuthApiError as e:
        if (getattr(e, "status", None) or 0) >= 500:
            raise _auth_unavailable(e) from e
        logger.warning(f"Token rejected by Supabase Auth: {str(e)}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    except AuthError as e:
        logger.warning(f"Token rejected by Supabase Auth: {str(e)}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
    except Exception as e:
        raise _auth_unavailable(e) from e

    user = response.user if response else None
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

    created_at = getattr(user, "created_at", None)
    return CurrentUser(
        id=str(user.id),
        email=user.email or None,
        created_at=created_at.isoformat() if hasattr(created_at, "isoformat") else created_at,
        access_token=token,
    )


def get_db(user: CurrentUser = Depends(get_current_user)) -> Client:
    """Per-request Supabase client acting as the authenticated user."""
    return store.create_supabase_client(user.access_token)
