"""
Shared fixtures: an in-process stand-in for a psycopg AsyncConnection and a
TestClient wired to it through FastAPI dependency overrides.
"""

import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app import auth_utils
from app.database import get_db_connection
from main import app

USER_ID = uuid.UUID("11111111-1111-4111-8111-111111111111")
OTHER_USER_ID = uuid.UUID("22222222-2222-4222-8222-222222222222")
NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeCursor:
    """Records every statement and answers from the connection's script"""

    def __init__(self, conn, row_factory=None):
        self.conn = conn
        self.row_factory = row_factory
        self.rows = []
        self.rowcount = -1

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, query, params=None):
        normalized = " ".join(query.split())
        self.conn.executed.append((normalized, params))
        if self.conn.handler is not None:
            rows = self.conn.handler(normalized, params)
        elif self.conn.responses:
            rows = self.conn.responses.pop(0)
        else:
            rows = []
        self.rows = list(rows or [])
        self.rowcount = len(self.rows)

    async def fetchone(self):
        return self.rows[0] if self.rows else None

    async def fetchall(self):
        return list(self.rows)


class FakeConnection:
    def __init__(self, responses=None, handler=None):
        self.responses = list(responses or [])
        self.handler = handler
        self.executed = []
        self.events = []

    def cursor(self, row_factory=None):
        return FakeCursor(self, row_factory=row_factory)

    async def execute(self, query, params=None):
        async with self.cursor() as cursor:
            await cursor.execute(query, params)
        return cursor

    @asynccontextmanager
    async def transaction(self):
        self.events.append("BEGIN")
        try:
            yield
        except Exception:
            self.events.append("ROLLBACK")
            raise
        self.events.append("COMMIT")

    def statements(self):
        return [query for query, _ in self.executed]


def make_user(user_id=USER_ID, username="alice"):
    return {
        "id": user_id,
        "username": username,
        "email": f"{username}@example.com",
        "full_name": username.title(),
        "avatar_url": None,
        "created_at": NOW,
    }


@pytest.fixture
def fake_conn():
    return FakeConnection()


@pytest.fixture
def current_user():
    return make_user()


@pytest.fixture
def client(fake_conn, current_user):
    """Authenticated client"""
    app.dependency_overrides[get_db_connection] = lambda: fake_conn
    app.dependency_overrides[auth_utils.get_current_user] = lambda: current_user
    app.dependency_overrides[auth_utils.get_optional_user] = lambda: current_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(fake_conn):
    """Client without a bearer token"""
    app.dependency_overrides[get_db_connection] = lambda: fake_conn
    app.dependency_overrides[auth_utils.get_optional_user] = lambda: None
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
