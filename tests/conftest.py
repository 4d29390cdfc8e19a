"""
Pytest configuration and fixtures for the billing ledger tests.
"""

import copy

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, func, select

from app.billing.finder import InvoiceFinder
from app.billing.writer import InvoiceWriter
from app.db.schema import metadata
from app.db.store import LedgerStore, get_store
from app.main import app

SAMPLE_INVOICE = {
    "title": "Mr",
    "customer_name": "Ravi Kumar",
    "location": "Pune",
    "billing_date": "2024-03-15",
    "items": [
        {"description": "Cement", "qty": 10, "rate": 5, "unit": "bag"},
    ],
    "tax": 10,
    "packing": 5,
}


@pytest.fixture
def engine(tmp_path):
    """Fresh SQLite file database with the billing schema."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'billing.sqlite'}",
        connect_args={"check_same_thread": False},
    )
    metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    store = LedgerStore(engine)
    yield store
    store.close()


@pytest.fixture
def writer(store):
    return InvoiceWriter(store)


@pytest.fixture
def finder(store):
    return InvoiceFinder(store)


@pytest.fixture
def invoice_payload():
    """Cement x10 @ 5, tax 10, packing 5."""
    return copy.deepcopy(SAMPLE_INVOICE)


@pytest.fixture
def make_payload():
    """Build an invoice payload, overriding any top-level field."""
    def _make(**overrides):
        payload = copy.deepcopy(SAMPLE_INVOICE)
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def client(engine):
    def _store_override():
        store = LedgerStore(engine)
        try:
            yield store
        finally:
            store.close()

    app.dependency_overrides[get_store] = _store_override
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def count_rows(engine):
    """Count rows of a table, optionally filtered by column equality."""
    def _count(table, **where):
        stmt = select(func.count()).select_from(table)
        for column, value in where.items():
            stmt = stmt.where(table.c[column] == value)
        with engine.connect() as conn:
            return conn.execute(stmt).scalar_one()
    return _count


@pytest.fixture
def fetch_rows(engine):
    def _fetch(table, **where):
        stmt = select(table).order_by(table.c.id)
        for column, value in where.items():
            stmt = stmt.where(table.c[column] == value)
        with engine.connect() as conn:
            return [dict(row) for row in conn.execute(stmt).mappings().all()]
    return _fetch


class FailingStore(LedgerStore):
    """Store that raises when a given kind of statement hits a given table."""

    def __init__(self, engine, statement_type, table_name):
        super().__init__(engine)
        self.statement_type = statement_type
        self.table_name = table_name

    def execute(self, statement, params=None):
        table = getattr(statement, "table", None)
        if isinstance(statement, self.statement_type) and table is not None and table.name == self.table_name:
            raise RuntimeError(f"simulated failure on {self.table_name}")
        return super().execute(statement, params)


class RecordingStore(LedgerStore):
    """Store that remembers how many rows each statement returned."""

    def __init__(self, engine):
        super().__init__(engine)
        self.row_counts = []

    def execute(self, statement, params=None):
        result = super().execute(statement, params)
        self.row_counts.append(len(result.rows))
        return result


@pytest.fixture
def failing_store(engine):
    """Factory for stores that blow up on e.g. (Insert, "billing_details")."""
    created = []

    def _make(statement_type, table_name):
        store = FailingStore(engine, statement_type, table_name)
        created.append(store)
        return store

    yield _make
    for store in created:
        store.close()


@pytest.fixture
def recording_store(engine):
    store = RecordingStore(engine)
    yield store
    store.close()
