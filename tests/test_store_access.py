from unittest.mock import MagicMock

import pytest

from app.api.deps import _bearer_token
from app.core import db as core_db
from app.core import supabase_store
from app.core.config import settings
from app.models.weight import WeightRecord
from conftest import make_supabase_client

SUPABASE_URL = "https://project.supabase.co"
WEIGHT_URL = "/v1/dashboard/weight"
VALID_WEIGHT = {"userId": "u1", "weight": "72.5", "date": "2024-03-01"}


@pytest.fixture
def supabase_backend(monkeypatch):
    monkeypatch.setattr(settings, "STORE_BACKEND", "supabase")
    monkeypatch.setattr(settings, "SUPABASE_URL", SUPABASE_URL)
    monkeypatch.setattr(settings, "SUPABASE_ANON_KEY", "anon-key")
    monkeypatch.setattr(settings, "SUPABASE_SERVICE_ROLE_KEY", "service-role-key")
    monkeypatch.setattr(supabase_store, "_admin_client", None)

    client, query = make_supabase_client([])
    create_client = MagicMock(return_value=client)
    monkeypatch.setattr(supabase_store, "create_client", create_client)
    return create_client, client, query


@pytest.mark.parametrize(
    "header, token",
    [
        ("Bearer user-jwt", "user-jwt"),
        ("bearer user-jwt", "user-jwt"),
        ("Bearer ", None),
        ("Basic dXNlcjpwYXNz", None),
        (None, None),
    ],
)
def test_bearer_token(header, token):
    assert _bearer_token(header) == token


def test_weight_endpoint_writes_with_service_role_key(client, supabase_backend):
    create_client, sb_client, query = supabase_backend
    query.execute.return_value = MagicMock(data=[{"id": 9, "user_id": "u1", "weight": 72.5, "date": "2024-03-01"}])

    response = client.post(WEIGHT_URL, json=VALID_WEIGHT, headers={"Authorization": "Bearer user-jwt"})

    assert response.status_code == 200
    assert response.json()["data"]["id"] == 9
    create_client.assert_called_once_with(SUPABASE_URL, "service-role-key")
    sb_client.postgrest.auth.assert_not_called()
    sb_client.table.assert_called_with("weight_records")


def test_progress_routes_use_anon_key_and_forward_token(client, supabase_backend):
    create_client, sb_client, _ = supabase_backend

    response = client.get("/v1/progress/u1", headers={"Authorization": "Bearer user-jwt"})

    assert response.status_code == 200
    create_client.assert_called_once_with(SUPABASE_URL, "anon-key")
    sb_client.postgrest.auth.assert_called_once_with("user-jwt")


def test_progress_routes_without_token_stay_anonymous(client, supabase_backend):
    create_client, sb_client, _ = supabase_backend

    assert client.get("/v1/progress/u1").status_code == 200
    create_client.assert_called_once_with(SUPABASE_URL, "anon-key")
    sb_client.postgrest.auth.assert_not_called()


def test_unconfigured_admin_client_keeps_json_contract(client, supabase_backend, monkeypatch):
    create_client, _, _ = supabase_backend
    monkeypatch.setattr(settings, "SUPABASE_URL", "")

    response = client.post(WEIGHT_URL, json=VALID_WEIGHT)

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error"}
    create_client.assert_not_called()


def test_incomplete_data_is_checked_before_store_is_opened(client, supabase_backend, monkeypatch):
    create_client, _, _ = supabase_backend
    monkeypatch.setattr(settings, "SUPABASE_URL", "")

    response = client.post(WEIGHT_URL, json={"weight": "70"})

    assert response.status_code == 400
    assert response.json() == {"error": "incomplete data"}
    create_client.assert_not_called()


def test_missing_database_keeps_json_contract(client, db_session, monkeypatch):
    monkeypatch.setattr(core_db, "SessionLocal", None)

    response = client.post(WEIGHT_URL, json=VALID_WEIGHT)

    assert response.status_code == 500
    assert response.json() == {"error": "internal server error"}
    assert db_session.query(WeightRecord).count() == 0
