"""
Shared pytest fixtures.

Supabase is replaced either by a MagicMock query builder (``make_query``),
when a test only cares about the calls made, or by ``FakeSupabase``, a small
in-memory table store used by the end-to-end scenarios.
"""

import os
from datetime import datetime, timedelta, timezone
from itertools import count
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# Settings are read at import time, so the environment must be set before
# anything from barber_api is imported.
os.environ["SUPABASE_URL"] = "https://test-project.supabase.co"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ["AWS_ACCESS_KEY_ID"] = "test-access-key"
os.environ["AWS_SECRET_ACCESS_KEY"] = "test-secret-key"
os.environ["S3_BUCKET_NAME"] = "barber-test"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["LOG_LEVEL"] = "WARNING"

BUCKET_URL = "https://barber-test.s3.us-east-1.amazonaws.com"


# ── Query builder mock ────────────────────────────────────────────────────

def _make_query(data=None, count=None):
    query = MagicMock()
    for method in ("select", "insert", "delete", "eq", "order", "limit", "offset", "maybe_single"):
        getattr(query, method).return_value = query
    query.execute = AsyncMock(return_value=SimpleNamespace(data=data, count=count))
    return query


@pytest.fixture
def make_query():
    """
    Factory for a chainable Supabase query whose execute() returns ``data``.

    Usage:
        supabase.table.return_value = make_query(data=[row])
    """
    return _make_query


@pytest.fixture
def mock_supabase():
    supabase = MagicMock()
    supabase.auth.get_user = AsyncMock()
    return supabase


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.upload_image = AsyncMock(return_value=f"{BUCKET_URL}/barbers/abc123.png")
    storage.delete_image = AsyncMock(return_value=True)
    return storage


@pytest.fixture
def sample_barber_row():
    return {
        "id": str(uuid4()),
        "title": "Fade",
        "caption": "Clean cut",
        "rating": 5,
        "image": f"{BUCKET_URL}/barbers/abc123.png",
        "user_id": "user-1",
        "created_at": "2024-05-01T10:00:00+00:00",
    }


# ── In-memory Supabase ────────────────────────────────────────────────────

class FakeQuery:
    def __init__(self, db, table):
        self.db = db
        self.table = table
        self._op = "select"
        self._columns = "*"
        self._count = None
        self._head = False
        self._payload = None
        self._filters = []
        self._order = None
        self._limit = None
        self._offset = 0
        self._single = False

    def select(self, columns="*", count=None, head=None):
        self._op = "select"
        self._columns = columns
        self._count = count
        self._head = bool(head)
        return self

    def insert(self, payload):
        self._op = "insert"
        self._payload = payload
        return self

    def delete(self):
        self._op = "delete"
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, size):
        self._limit = size
        return self

    def offset(self, size):
        self._offset = size
        return self

    def maybe_single(self):
        self._single = True
        return self

    def _embed_owner(self, row):
        out = {k: v for k, v in row.items() if k != "user_id"}
        owner = next((u for u in self.db.tables["users"] if u["id"] == row.get("user_id")), None)
        out["user"] = (
            {"id": owner["id"], "username": owner.get("username"), "profile_image": owner.get("profile_image")}
            if owner else None
        )
        return out

    async def execute(self):
        rows = self.db.tables.setdefault(self.table, [])

        if self._op == "insert":
            row = dict(self._payload)
            row.setdefault("id", str(uuid4()))
            row.setdefault("created_at", self.db.next_timestamp())
            rows.append(row)
            return SimpleNamespace(data=[dict(row)], count=None)

        matched = [r for r in rows if all(str(r.get(c)) == str(v) for c, v in self._filters)]

        if self._op == "delete":
            self.db.tables[self.table] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=matched, count=None)

        if self._order:
            column, desc = self._order
            matched = sorted(matched, key=lambda r: r[column], reverse=desc)
        total = len(matched) if self._count else None
        end = None if self._limit is None else self._offset + self._limit
        page = matched[self._offset:end]
        if "user:users(" in self._columns:
            page = [self._embed_owner(r) for r in page]
        else:
            page = [dict(r) for r in page]

        if self._single:
            return SimpleNamespace(data=page[0], count=None) if page else None
        return SimpleNamespace(data=[] if self._head else page, count=total)


class FakeSupabase:
    def __init__(self):
        self.tables = {"users": [], "barbers": []}
        self._clock = count()
        self.auth = MagicMock()

    def next_timestamp(self):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        return (base + timedelta(minutes=next(self._clock))).isoformat()

    def table(self, name):
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    db = FakeSupabase()
    db.tables["users"].extend([
        {"id": "user-1", "email": "one@example.com", "username": "one", "profile_image": "https://img/one.svg"},
        {"id": "user-2", "email": "two@example.com", "username": "two", "profile_image": "https://img/two.svg"},
    ])
    return db


# ── HTTP client ───────────────────────────────────────────────────────────

@pytest.fixture
def app():
    from barber_api.main import app
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient wired straight to the ASGI app.

    Startup events do not run under ASGITransport, so no Supabase client is
    created; tests override the dependencies they need.
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
