import os

# Must be set before the app modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORE_BACKEND"] = "sql"
os.environ["PHOTO_ANALYSIS_DELAY_SECONDS"] = "0"

from contextlib import nullcontext
from datetime import date, datetime

from unittest.mock import MagicMock

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient

from app.api.deps import get_aggregator, get_user_store
from app.core.db import Base, SessionLocal, engine
from app.core.progress import ProgressAggregator
from app.core.sql_store import SqlProgressStore
from app.core.store import ProgressStore, StoreError
from app.main import app

FIXED_NOW = datetime(2024, 6, 15, 10, 30, 0)


class FakeStore(ProgressStore):
    """In-memory store. Operations named in `failing` raise StoreError."""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.weights = []
        self.photos = {}
        self.metrics = {}
        self.calls = []

    def _check(self, op):
        self.calls.append(op)
        if op in self.failing:
            raise StoreError(f"{op} failed")

    def insert_weight_record(self, user_id, weight, record_date):
        self._check("insert_weight_record")
        row = {"id": len(self.weights) + 1, "user_id": user_id, "weight": weight, "date": record_date}
        self.weights.append(row)
        return dict(row)

    def get_photo(self, user_id, month, year):
        self._check("get_photo")
        row = self.photos.get((user_id, month, year))
        return dict(row) if row else None

    def upsert_photo(self, user_id, month, year, photo_url, created_at):
        self._check("upsert_photo")
        row = {"user_id": user_id, "month": month, "year": year, "photo_url": photo_url, "created_at": created_at}
        self.photos[(user_id, month, year)] = row
        return dict(row)

    def get_metrics(self, user_id, month, year):
        self._check("get_metrics")
        row = self.metrics.get((user_id, month, year))
        return dict(row) if row else None

    def upsert_metrics(self, user_id, month, year, values):
        self._check("upsert_metrics")
        row = self.metrics.setdefault((user_id, month, year), {"user_id": user_id, "month": month, "year": year})
        row.update(values)
        return dict(row)

    def list_weight_records_since(self, user_id, since):
        self._check("list_weight_records_since")
        rows = [
            r for r in self.weights
            if r["user_id"] == user_id and date.fromisoformat(str(r["date"])) >= since
        ]
        return sorted(rows, key=lambda r: str(r["date"]))


def make_supabase_client(data):
    """MagicMock standing in for a supabase Client; every query returns `data`."""
    client = MagicMock()
    query = client.table.return_value
    for method in ("select", "eq", "gte", "order", "limit", "insert", "upsert"):
        getattr(query, method).return_value = query
    query.execute.return_value = MagicMock(data=data)
    return client, query


def store_factory(store):
    """Stand-in for get_admin_store_factory that always opens `store`."""
    return lambda: (lambda: nullcontext(store))


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def sql_store(db_session):
    return SqlProgressStore(db_session)


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client(sleeps):
    def fixed_aggregator(store: ProgressStore = Depends(get_user_store)):
        return ProgressAggregator(store, clock=lambda: FIXED_NOW, sleep=sleeps.append)

    app.dependency_overrides[get_aggregator] = fixed_aggregator
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
