"""
Shared test fixtures.
"""

import os
import sys
from pathlib import Path

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# Settings require Supabase credentials at import time
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test-anon-key")

import pytest
from copy import deepcopy
from unittest.mock import MagicMock, patch
from typing import Generator, Optional

from exceptions import DatabaseError
from models.shipping_resource import Resource, ResourceKind


# ===================
# MOCK SUPABASE CLIENT
# ===================

class MockSupabaseResponse:
    """Mock Supabase query response."""

    def __init__(self, data: list = None, count: int = None):
        self.data = data or []
        self.count = count if count is not None else len(self.data)


class MockSupabaseQuery:
    """Mock Supabase query builder with chainable methods."""

    def __init__(self, table: "MockSupabaseTable"):
        self._table = table
        self._filters: list[tuple[str, object]] = []
        self._limit: Optional[int] = None
        self._upsert: Optional[dict] = None

    def select(self, *args, **kwargs):
        return self

    def upsert(self, data, on_conflict: str = None):
        self._upsert = data
        self._table.upserts.append({"data": data, "on_conflict": on_conflict})
        return self

    def eq(self, column, value):
        self._filters.append((column, value))
        return self

    def order(self, column, **kwargs):
        self._table.orders.append(column)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def execute(self) -> MockSupabaseResponse:
        if self._table.error is not None:
            raise self._table.error
        if self._upsert is not None:
            return MockSupabaseResponse(data=[self._upsert])

        rows = [
            row for row in self._table.data
            if all(row.get(column) == value for column, value in self._filters)
        ]
        if self._limit is not None:
            rows = rows[:self._limit]
        return MockSupabaseResponse(data=deepcopy(rows))


class MockSupabaseTable:
    """Mock Supabase table with configurable rows; records upserts."""

    def __init__(self, data: list = None):
        self.data = data or []
        self.upserts: list[dict] = []
        self.orders: list[str] = []
        self.error: Optional[Exception] = None

    def select(self, *args, **kwargs):
        return MockSupabaseQuery(self).select(*args, **kwargs)

    def upsert(self, data, on_conflict: str = None):
        return MockSupabaseQuery(self).upsert(data, on_conflict=on_conflict)


class MockSupabaseClient:
    """Mock Supabase client."""

    def __init__(self):
        self._tables: dict[str, MockSupabaseTable] = {}

    def set_table_data(self, table_name: str, data: list):
        """Configure mock rows for a table."""
        self.table(table_name).data = data

    def fail_table(self, table_name: str, error: Exception):
        """Make every query on a table raise ``error``."""
        self.table(table_name).error = error

    def table(self, name: str) -> MockSupabaseTable:
        """Get mock table."""
        if name not in self._tables:
            self._tables[name] = MockSupabaseTable()
        return self._tables[name]


# ===================
# IN-MEMORY PARTITION STORE
# ===================

class InMemoryPartitionStore:
    """
    PartitionStore keeping resources in a dict.

    Usage:
        store = InMemoryPartitionStore(["wh-a", "wh-b"])
        store.seed("wh-a", ResourceKind.BOX, [resource])
        store.fail_writes_for("wh-b")
    """

    def __init__(self, partition_ids: list[str] = None):
        self.partition_ids = list(partition_ids or [])
        self.rows: dict[tuple[str, ResourceKind], list[Resource]] = {}
        self.saved: list[tuple[str, ResourceKind]] = []
        self._failing: dict[str, Exception] = {}

    def seed(self, partition_id: str, kind: ResourceKind, resources: list[Resource]):
        self.rows[(partition_id, kind)] = list(resources)

    def fail_writes_for(self, partition_id: str, error: Optional[Exception] = None):
        self._failing[partition_id] = error or DatabaseError(
            "upsert", "connection reset", details={"partition_id": partition_id}
        )

    def list_partitions(self) -> list[str]:
        return list(self.partition_ids)

    def list_resources(self, partition_id: str, kind: ResourceKind) -> list[Resource]:
        return list(self.rows.get((partition_id, kind), []))

    def save_resources(self, partition_id: str, kind: ResourceKind, resources: list[Resource]) -> None:
        if partition_id in self._failing:
            raise self._failing[partition_id]
        self.rows[(partition_id, kind)] = list(resources)
        self.saved.append((partition_id, kind))


# ===================
# FIXTURES
# ===================

@pytest.fixture
def mock_supabase() -> MockSupabaseClient:
    """
    Create a mock Supabase client.

    Usage:
        def test_something(mock_supabase):
            mock_supabase.set_table_data("warehouses", [
                {"id": "wh-a", "created_at": "2025-01-01T00:00:00Z"}
            ])
    """
    return MockSupabaseClient()


@pytest.fixture
def mock_db(mock_supabase) -> Generator:
    """
    Patch the database client with mock.

    Any code using get_supabase_client() gets the mock.
    """
    with patch("config.database.get_supabase_client", return_value=mock_supabase):
        with patch("services.partition_store.get_supabase_client", return_value=mock_supabase):
            yield mock_supabase


@pytest.fixture
def partition_ids() -> list[str]:
    """Three warehouses in display order."""
    return ["wh-a", "wh-b", "wh-c"]


@pytest.fixture
def store(partition_ids) -> InMemoryPartitionStore:
    """Empty in-memory store with three warehouses."""
    return InMemoryPartitionStore(partition_ids)


@pytest.fixture
def mock_catalog_client() -> MagicMock:
    """Carrier catalog client returning whatever the test configures."""
    return MagicMock()


# ===================
# API TEST CLIENT
# ===================

@pytest.fixture
def test_client():
    """
    Create FastAPI test client.

    Usage:
        def test_endpoint(test_client):
            response = test_client.get("/api/shipping/box")
    """
    from fastapi.testclient import TestClient
    from main import app

    return TestClient(app)
