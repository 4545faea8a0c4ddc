import copy
from datetime import date
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from postgrest.exceptions import APIError

from finance_tracker.core.security import get_current_user, get_db
from finance_tracker.main import app
from finance_tracker.models.user import CurrentUser
from finance_tracker.utils.periods import get_today

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
TODAY = date(2025, 3, 15)

SEED = {
    "categories": [
        {"id": "cat-food", "user_id": USER_ID, "name": "Food", "type": "expense", "color": "#f97316", "created_at": "2025-01-01T00:00:00"},
        {"id": "cat-rent", "user_id": USER_ID, "name": "Rent", "type": "expense", "color": "#ef4444", "created_at": "2025-01-01T00:00:00"},
        {"id": "cat-salary", "user_id": USER_ID, "name": "Salary", "type": "income", "color": "#22c55e", "created_at": "2025-01-01T00:00:00"},
        {"id": "cat-other", "user_id": OTHER_USER_ID, "name": "Bonus", "type": "income", "color": "#000000", "created_at": "2025-01-01T00:00:00"},
    ],
    "transactions": [
        {"id": "t1", "user_id": USER_ID, "amount": 3000, "type": "income", "category_id": "cat-salary", "description": "March pay", "transaction_date": "2025-03-01", "created_at": "2025-03-01T09:00:00"},
        {"id": "t2", "user_id": USER_ID, "amount": 1200, "type": "expense", "category_id": "cat-rent", "description": "", "transaction_date": "2025-03-02", "created_at": "2025-03-02T09:00:00"},
        {"id": "t3", "user_id": USER_ID, "amount": "300.50", "type": "expense", "category_id": "cat-food", "description": "Groceries", "transaction_date": "2025-03-10", "created_at": "2025-03-10T09:00:00"},
        {"id": "t4", "user_id": USER_ID, "amount": 99.5, "type": "expense", "category_id": "cat-food", "description": "Dinner", "transaction_date": "2025-03-20", "created_at": "2025-03-14T09:00:00"},
        {"id": "t5", "user_id": USER_ID, "amount": 2500, "type": "income", "category_id": "cat-salary", "description": "February pay", "transaction_date": "2025-02-01", "created_at": "2025-02-01T09:00:00"},
        {"id": "t6", "user_id": USER_ID, "amount": 500, "type": "expense", "category_id": "cat-rent", "description": "", "transaction_date": "2025-02-03", "created_at": "2025-02-03T09:00:00"},
        {"id": "t7", "user_id": USER_ID, "amount": 100, "type": "expense", "category_id": "cat-food", "description": "Holiday dinner", "transaction_date": "2024-12-24", "created_at": "2024-12-24T09:00:00"},
        {"id": "t8", "user_id": OTHER_USER_ID, "amount": 99999, "type": "income", "category_id": "cat-other", "description": "", "transaction_date": "2025-03-05", "created_at": "2025-03-05T09:00:00"},
    ],
    "savings_goals": [
        {"id": "g1", "user_id": USER_ID, "name": "Vacation", "target_amount": 2000, "current_amount": 500, "start_date": "2025-01-01", "end_date": "2025-08-01", "created_at": "2025-01-01T00:00:00"},
        {"id": "g2", "user_id": USER_ID, "name": "Laptop", "target_amount": 1000, "current_amount": "1500", "start_date": "2025-01-01", "end_date": "2025-05-01", "created_at": "2025-01-01T00:00:00"},
        {"id": "g3", "user_id": OTHER_USER_ID, "name": "Car", "target_amount": 9000, "current_amount": 10, "start_date": "2025-01-01", "end_date": "2025-04-01", "created_at": "2025-01-01T00:00:00"},
    ],
}


class FakeQuery:
    """Minimal stand-in for the PostgREST request builder."""

    def __init__(self, db, table):
        self._db = db
        self._table = table
        self._action = "select"
        self._columns = "*"
        self._payload = None
        self._filters = []
        self._order = None
        self._limit = None

    def select(self, columns="*", **kwargs):
        self._action = "select"
        self._columns = columns
        return self

    def insert(self, payload):
        self._action = "insert"
        self._payload = payload
        return self

    def update(self, payload):
        self._action = "update"
        self._payload = payload
        return self

    def delete(self):
        self._action = "delete"
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and str(row[column]) >= str(value))
        return self

    def lte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and str(row[column]) <= str(value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self):
        self._db.calls.append((self._table, self._action))
        if self._db.error is not None and self._db.error_table in (None, self._table):
            raise self._db.error

        rows = self._db.tables.setdefault(self._table, [])
        if self._action == "insert":
            row = {"id": str(uuid4()), "created_at": "2025-03-15T12:00:00", **self._payload}
            rows.append(row)
            return SimpleNamespace(data=[copy.deepcopy(row)], count=None)

        matched = [row for row in rows if all(check(row) for check in self._filters)]

        if self._action == "update":
            for row in matched:
                row.update(self._payload)
            return SimpleNamespace(data=copy.deepcopy(matched), count=None)

        if self._action == "delete":
            self._db.tables[self._table] = [row for row in rows if row not in matched]
            return SimpleNamespace(data=copy.deepcopy(matched), count=None)

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda row: str(row.get(column) or ""), reverse=desc)
        if self._limit is not None:
            matched = matched[: self._limit]
        return SimpleNamespace(data=[self._project(row) for row in matched], count=None)

    def _project(self, row):
        row = copy.deepcopy(row)
        if self._columns == "id":
            return {"id": row["id"]}
        if "categories" in self._columns:
            row["categories"] = next(
                (copy.deepcopy(c) for c in self._db.tables.get("categories", []) if c["id"] == row.get("category_id")),
                None,
            )
        return row


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = copy.deepcopy(tables if tables is not None else SEED)
        self.calls = []
        self.error = None
        self.error_table = None

    def table(self, name):
        return FakeQuery(self, name)

    def fail_with(self, message="permission denied for table", table=None):
        self.error_table = table
        self.error = APIError({"message": message, "code": "42501", "hint": None, "details": None})


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def current_user():
    return CurrentUser(id=USER_ID, email="user@mail.com", access_token="test-token")


@pytest.fixture
def client(fake_db, current_user):
    app.dependency_overrides[get_current_user] = lambda: current_user
    app.dependency_overrides[get_db] = lambda: fake_db
    app.dependency_overrides[get_today] = lambda: TODAY
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
