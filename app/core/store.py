from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Any

Row = dict[str, Any]


class StoreError(Exception):
    """Raised by a store when the backing database rejects or fails an operation."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ProgressStore(ABC):
    """
    Persistence for the progress dashboard.

    Rows come back as plain dicts keyed by column name, whatever the backend.
    Photo and metric writes are upserts on (user_id, month, year).
    """

    @abstractmethod
    def insert_weight_record(self, user_id: str, weight: float, record_date: date | str) -> Row:
        """Insert one weight row. record_date is a date or an ISO date string."""
        ...

    @abstractmethod
    def get_photo(self, user_id: str, month: int, year: int) -> Row | None:
        ...

    @abstractmethod
    def upsert_photo(
        self,
        user_id: str,
        month: int,
        year: int,
        photo_url: str | None,
        created_at: datetime,
    ) -> Row:
        ...

    @abstractmethod
    def get_metrics(self, user_id: str, month: int, year: int) -> Row | None:
        ...

    @abstractmethod
    def upsert_metrics(self, user_id: str, month: int, year: int, values: dict[str, float]) -> Row:
        ...

    @abstractmethod
    def list_weight_records_since(self, user_id: str, since: date) -> list[Row]:
        """Weight rows with date >= since, oldest first."""
        ...
