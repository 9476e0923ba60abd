import logging
from datetime import date, datetime

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from app.core.config import settings
from app.core.store import ProgressStore, Row, StoreError
from app.models.body_metrics import METRIC_FIELDS

logger = logging.getLogger(__name__)

UPSERT_CONFLICT_TARGET = "user_id,month,year"

_admin_client: Client | None = None


def get_admin_client() -> Client:
    """
    Service-role client. Bypasses row-level security, so only trusted
    server-side code paths may use it.
    """
    global _admin_client
    if _admin_client is None:
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
            raise ValueError("Supabase URL and service role key must be configured")
        _admin_client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
    return _admin_client


def get_user_client(access_token: str | None) -> Client:
    """Anon-key client acting as the caller; RLS policies apply."""
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        raise ValueError("Supabase URL and anon key must be configured")
    client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
    if access_token:
        client.postgrest.auth(access_token)
    return client


class SupabaseProgressStore(ProgressStore):
    def __init__(self, client: Client):
        self.client = client

    def _execute(self, action: str, query) -> list[Row]:
        try:
            response = query.execute()
        except APIError as exc:
            logger.error("Supabase rejected %s: %s", action, exc.message)
            raise StoreError(exc.message or str(exc))
        except httpx.HTTPError as exc:
            logger.error("Supabase request failed during %s: %s", action, exc)
            raise StoreError(str(exc))
        return response.data or []

    def _single(self, table: str, user_id: str, month: int, year: int) -> Row | None:
        rows = self._execute(
            f"select from {table}",
            self.client.table(table)
            .select("*")
            .eq("user_id", user_id)
            .eq("month", month)
            .eq("year", year)
            .limit(1),
        )
        return rows[0] if rows else None

    def insert_weight_record(self, user_id: str, weight: float, record_date: date | str) -> Row:
        if isinstance(record_date, date):
            record_date = record_date.isoformat()
        rows = self._execute(
            "insert into weight_records",
            self.client.table("weight_records").insert(
                {"user_id": user_id, "weight": weight, "date": record_date}
            ),
        )
        if not rows:
            raise StoreError("insert returned no row")
        return rows[0]

    def get_photo(self, user_id: str, month: int, year: int) -> Row | None:
        return self._single("progress_photos", user_id, month, year)

    def upsert_photo(
        self,
        user_id: str,
        month: int,
        year: int,
        photo_url: str | None,
        created_at: datetime,
    ) -> Row:
        rows = self._execute(
            "upsert into progress_photos",
            self.client.table("progress_photos").upsert(
                {
                    "user_id": user_id,
                    "month": month,
                    "year": year,
                    "photo_url": photo_url,
                    "created_at": created_at.isoformat(),
                },
                on_conflict=UPSERT_CONFLICT_TARGET,
            ),
        )
        return rows[0] if rows else {}

    def get_metrics(self, user_id: str, month: int, year: int) -> Row | None:
        return self._single("body_metrics", user_id, month, year)

    def upsert_metrics(self, user_id: str, month: int, year: int, values: dict[str, float]) -> Row:
        payload = {"user_id": user_id, "month": month, "year": year}
        payload.update({k: v for k, v in values.items() if k in METRIC_FIELDS})
        payload["updated_at"] = datetime.utcnow().isoformat()

        rows = self._execute(
            "upsert into body_metrics",
            self.client.table("body_metrics").upsert(payload, on_conflict=UPSERT_CONFLICT_TARGET),
        )
        return rows[0] if rows else {}

    def list_weight_records_since(self, user_id: str, since: date) -> list[Row]:
        return self._execute(
            "select from weight_records",
            self.client.table("weight_records")
            .select("*")
            .eq("user_id", user_id)
            .gte("date", since.isoformat())
            .order("date"),
        )
