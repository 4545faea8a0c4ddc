from datetime import datetime, timezone
from types import SimpleNamespace

import httpx
import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from supabase import AuthApiError, AuthRetryableError

from finance_tracker.core import security
from finance_tracker.db import store
from finance_tracker.main import app


class FakeAuth:
    def __init__(self, user=None, error=None):
        self._user = user
        self._error = error
        self.tokens = []

    def get_user(self, token):
        self.tokens.append(token)
        if self._error is not None:
            raise self._error
        return SimpleNamespace(user=self._user)


class RejectedToken(AuthApiError):
    def __init__(self, message="invalid JWT", status=401):
        Exception.__init__(self, message)
        self.message = message
        self.status = status


class AuthUnreachable(AuthRetryableError):
    def __init__(self, message="upstream timed out"):
        Exception.__init__(self, message)
        self.message = message
        self.status = 504


def _patch_auth(monkeypatch, auth):
    monkeypatch.setattr(store, "get_supabase", lambda: SimpleNamespace(auth=auth))


def test_extract_bearer_token():
    assert security.extract_bearer_token("Bearer abc.def") == "abc.def"
    for header in (None, "", "Basic abc", "Bearer "):
        with pytest.raises(HTTPException) as exc:
            security.extract_bearer_token(header)
        assert exc.value.status_code == 401


def test_get_current_user_resolves_supabase_user(monkeypatch):
    created = datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    auth = FakeAuth(user=SimpleNamespace(id="user-1", email="user@mail.com", created_at=created))
    _patch_auth(monkeypatch, auth)

    user = security.get_current_user("Bearer token-123")
    assert user.id == "user-1"
    assert user.email == "user@mail.com"
    assert user.created_at == created.isoformat()
    assert user.access_token == "token-123"
    assert auth.tokens == ["token-123"]


def test_get_current_user_rejects_invalid_token(monkeypatch):
    _patch_auth(monkeypatch, FakeAuth(error=RejectedToken()))
    with pytest.raises(HTTPException) as exc:
        security.get_current_user("Bearer nope")
    assert exc.value.status_code == 401


def test_get_current_user_rejects_missing_user(monkeypatch):
    _patch_auth(monkeypatch, FakeAuth(user=None))
    with pytest.raises(HTTPException) as exc:
        security.get_current_user("Bearer nope")
    assert exc.value.status_code == 401


def test_protected_routes_require_token():
    with TestClient(app) as test_client:
        assert test_client.get("/api/transactions").status_code == 401
        assert test_client.get("/api/dashboard").status_code == 401
        assert test_client.get("/api/auth/me").status_code == 401


def test_me_returns_current_user_profile(client):
    response = client.get("/api/auth/me")
    assert response.status_code == 200
    body = response.json()
    assert body == {"id": "user-1", "email": "user@mail.com", "created_at": None}


def test_missing_supabase_config_raises(monkeypatch):
    monkeypatch.setattr(store.settings, "SUPABASE_URL", "")
    with pytest.raises(RuntimeError, match="SUPABASE_URL"):
        store.create_supabase_client()


@pytest.mark.parametrize(
    "error",
    [
        httpx.ConnectError("connection refused"),
        AuthUnreachable(),
        RejectedToken("internal error", status=500),
    ],
)
def test_auth_outage_is_not_reported_as_invalid_token(monkeypatch, error):
    _patch_auth(monkeypatch, FakeAuth(error=error))
    with pytest.raises(store.StoreError):
        security.get_current_user("Bearer token-123")


def test_auth_outage_answers_bad_gateway(monkeypatch):
    _patch_auth(monkeypatch, FakeAuth(error=httpx.ConnectError("connection refused")))
    with TestClient(app) as test_client:
        response = test_client.get("/api/auth/me", headers={"Authorization": "Bearer token-123"})
    assert response.status_code == 502
    assert "unavailable" in response.json()["detail"]
