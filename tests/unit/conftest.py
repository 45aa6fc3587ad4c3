"""
pytest fixtures for unit tests
In-memory stand-ins for the asyncpg pool and the contacts store; no database required.
"""

import pytest
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Any, Dict, List

from fastapi.testclient import TestClient

import database.connection as connection
from app import app
from services.base_service import ServiceResult
from services.contacts_service import ContactsService, get_contacts_service


class FakeTransaction:
    """Async context manager mimicking asyncpg's Transaction"""

    def __init__(self, conn: "FakeConnection"):
        self.conn = conn

    async def __aenter__(self):
        self.conn.transactions += 1
        return self

    async def __aexit__(self, exc_type, exc, tb):
        if exc_type is not None:
            self.conn.rollbacks += 1
        return False


class FakeConnection:
    """Records every statement; fetch() returns queued result sets in order"""

    def __init__(self):
        self.executed: List[tuple] = []
        self.fetch_results: List[List[Dict[str, Any]]] = []
        self.fetch_error = None
        self.transactions = 0
        self.rollbacks = 0

    async def execute(self, query: str, *args):
        self.executed.append((query, args))
        return "OK"

    async def fetch(self, query: str, *args):
        self.executed.append((query, args))
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.fetch_results.pop(0) if self.fetch_results else []

    async def fetchval(self, query: str, *args):
        self.executed.append((query, args))
        if self.fetch_error is not None:
            raise self.fetch_error
        return 1

    def transaction(self):
        return FakeTransaction(self)

    def statements(self) -> List[str]:
        return [" ".join(query.split()) for query, _ in self.executed]


class FakePool:
    """Pool that always hands out the same FakeConnection"""

    def __init__(self, conn: FakeConnection):
        self.conn = conn
        self.closed = False

    @asynccontextmanager
    async def acquire(self):
        yield self.conn

    async def close(self):
        self.closed = True


class InMemoryContactsService(ContactsService):
    """
    ContactsService whose statements run against a dict instead of PostgreSQL

    Validation and result handling stay the real service's; only the
    per-operation SQL is replaced with equivalent in-memory behavior.
    """

    def __init__(self):
        super().__init__()
        self.rows: Dict[Any, Dict[str, Any]] = {}
        self.unavailable = False

    async def _fetch(self, operation: str, query: str, *args) -> ServiceResult:
        if self.unavailable:
            return self._database_error(operation, OSError("connection refused"))
        handler = getattr(self, f"_memory_{operation.lower()}")
        return ServiceResult.ok([dict(row) for row in handler(*args)])

    def _ordered(self, rows):
        return sorted(rows, key=lambda row: (row["created_at"], row["id"]))

    def _memory_create(self, contact_id, first_name, last_name, phone, now):
        row = {
            "id": contact_id,
            "first_name": first_name,
            "last_name": last_name,
            "phone": phone,
            "created_at": now,
            "updated_at": now,
        }
        self.rows[contact_id] = row
        return [row]

    def _memory_list(self):
        return self._ordered(self.rows.values())

    def _memory_get(self, contact_id):
        row = self.rows.get(contact_id)
        return [row] if row else []

    def _memory_update(self, contact_id, first_name, last_name, phone, now):
        row = self.rows.get(contact_id)
        if row is None:
            return []
        if first_name is not None:
            row["first_name"] = first_name
        if last_name is not None:
            row["last_name"] = last_name
        if phone is not None:
            row["phone"] = phone
        row["updated_at"] = max(now, row["updated_at"] + timedelta(microseconds=1))
        return [row]

    def _memory_search(self, phone):
        return self._ordered(row for row in self.rows.values() if row["phone"] == phone)


@pytest.fixture
def fake_connection():
    return FakeConnection()


@pytest.fixture
def fake_pool(fake_connection, monkeypatch):
    """Install a FakePool as the global database pool"""
    pool = FakePool(fake_connection)
    monkeypatch.setattr(connection, "db_pool", pool)
    return pool


@pytest.fixture
def no_pool(monkeypatch):
    """Simulate a service whose pool was never initialized"""
    monkeypatch.setattr(connection, "db_pool", None)


@pytest.fixture
def contacts_store():
    return InMemoryContactsService()


@pytest.fixture
def client(contacts_store):
    """TestClient with the contacts service swapped for the in-memory store"""
    app.dependency_overrides[get_contacts_service] = lambda: contacts_store
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
