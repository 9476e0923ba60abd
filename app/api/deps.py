from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator

from fastapi import Depends, Header

from app.core.config import settings
from app.core.db import get_db
from app.core.progress import ProgressAggregator
from app.core.sql_store import SqlProgressStore
from app.core.store import ProgressStore
from app.core.supabase_store import SupabaseProgressStore, get_admin_client, get_user_client

_db_session = contextmanager(get_db)


@contextmanager
def sql_store() -> Iterator[ProgressStore]:
    with _db_session() as db:
        yield SqlProgressStore(db)


def _bearer_token(authorization: str | None) -> str | None:
    if authorization and authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


@contextmanager
def admin_store() -> Iterator[ProgressStore]:
    """Store with elevated credentials. Only for trusted server-side writes."""
    if settings.STORE_BACKEND == "supabase":
        yield SupabaseProgressStore(get_admin_client())
        return
    with sql_store() as store:
        yield store


def get_admin_store_factory() -> Callable[[], ContextManager[ProgressStore]]:
    # Handed over unopened: the caller opens it inside its own error handling.
    return admin_store


def get_user_store(
    authorization: str | None = Header(default=None),
) -> Iterator[ProgressStore]:
    """Store scoped to the calling user; the bearer token is forwarded to Supabase."""
    if settings.STORE_BACKEND == "supabase":
        yield SupabaseProgressStore(get_user_client(_bearer_token(authorization)))
        return
    with sql_store() as store:
        yield store


def get_aggregator(store: ProgressStore = Depends(get_user_store)) -> ProgressAggregator:
    return ProgressAggregator(store)
