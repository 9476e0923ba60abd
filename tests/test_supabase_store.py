from datetime import date, datetime

import pytest
from postgrest.exceptions import APIError

from app.core.store import StoreError
from app.core.supabase_store import SupabaseProgressStore
from conftest import make_supabase_client as make_client


def test_insert_weight_record_returns_inserted_row():
    client, query = make_client([{"id": 1, "user_id": "u1", "weight": 72.5, "date": "2024-03-01"}])

    row = SupabaseProgressStore(client).insert_weight_record("u1", 72.5, date(2024, 3, 1))

    client.table.assert_called_with("weight_records")
    query.insert.assert_called_once_with({"user_id": "u1", "weight": 72.5, "date": "2024-03-01"})
    assert row["id"] == 1


def test_upserts_target_user_month_year():
    client, query = make_client([{"id": 3}])
    store = SupabaseProgressStore(client)

    store.upsert_photo("u1", 6, 2024, "url", datetime(2024, 6, 15))
    assert query.upsert.call_args.kwargs["on_conflict"] == "user_id,month,year"

    store.upsert_metrics("u1", 6, 2024, {"arms": 10.0, "bogus": 1})
    payload = query.upsert.call_args.args[0]
    assert payload["arms"] == 10.0
    assert "bogus" not in payload
    assert query.upsert.call_args.kwargs["on_conflict"] == "user_id,month,year"


def test_missing_row_is_none():
    client, _ = make_client([])
    assert SupabaseProgressStore(client).get_metrics("u1", 6, 2024) is None


def test_weight_history_query():
    client, query = make_client([{"weight": 80, "date": "2024-01-05"}])

    rows = SupabaseProgressStore(client).list_weight_records_since("u1", date(2023, 12, 15))

    query.gte.assert_called_once_with("date", "2023-12-15")
    query.order.assert_called_once_with("date")
    assert rows == [{"weight": 80, "date": "2024-01-05"}]


def test_api_errors_become_store_errors():
    client, query = make_client([])
    query.execute.side_effect = APIError({"message": "permission denied for table weight_records"})

    with pytest.raises(StoreError) as exc_info:
        SupabaseProgressStore(client).insert_weight_record("u1", 70.0, "2024-03-01")
    assert exc_info.value.message == "permission denied for table weight_records"
