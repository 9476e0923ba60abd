import logging
import math
import time
from datetime import date, datetime
from enum import Enum
from typing import Any, Callable, Iterable, Mapping

from dateutil.relativedelta import relativedelta
from pydantic import BaseModel

from app.core.config import settings
from app.core.feedback import select_feedback
from app.core.parsing import float_or_zero, parse_float, round1
from app.core.store import ProgressStore, StoreError
from app.models.body_metrics import METRIC_FIELDS, REGION_FIELDS

logger = logging.getLogger(__name__)

MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

REGION_LABELS = {
    "arms": "Arms",
    "chest": "Chest",
    "back": "Back",
    "abdomen": "Abdomen",
    "legs": "Legs",
}

RADAR_FULL_MARK = 100

# Placeholder body-fat estimate: 20% at 80 kg, half a point per kg either side.
BODY_FAT_BASE_PCT = 20.0
BODY_FAT_REFERENCE_KG = 80.0
BODY_FAT_PCT_PER_KG = 0.5


class UploadState(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    SAVED = "saved"


# ---------- View models ----------

class MonthPhoto(BaseModel):
    month: int
    year: int
    photo_url: str | None = None


class WeightPoint(BaseModel):
    month: str
    weight: float
    body_fat: float


class RadarPoint(BaseModel):
    metric: str
    value: float
    full_mark: int = RADAR_FULL_MARK


class ProgressView(BaseModel):
    user_id: str
    month: int
    year: int
    month_photos: list[MonthPhoto]
    total_photos: int
    has_metrics: bool
    metrics: dict[str, float]
    radar: list[RadarPoint]
    progress_data: list[WeightPoint]
    feedback: str


class PhotoUploadResult(BaseModel):
    """
    Outcome of one upload. `state` is where the upload settled (SAVED, or IDLE
    when the save failed); `transitions` is the path it took from IDLE.
    """

    saved: bool
    state: UploadState
    transitions: list[UploadState]
    view: ProgressView | None = None


# ---------- Pure helpers ----------

def photo_history_keys(today: date, months: int = 12) -> list[tuple[int, int]]:
    """(month, year) for today's month and the months before it, most recent first."""
    first = today.replace(day=1)
    keys = []
    for i in range(months):
        d = first - relativedelta(months=i)
        keys.append((d.month, d.year))
    return keys


def weight_history_start(today: date, months: int = 6) -> date:
    return today - relativedelta(months=months)


def estimate_body_fat(mean_weight: float) -> float:
    return BODY_FAT_BASE_PCT - (mean_weight - BODY_FAT_REFERENCE_KG) * BODY_FAT_PCT_PER_KG


def _record_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def aggregate_weight_series(records: Iterable[Mapping[str, Any]]) -> list[WeightPoint]:
    """
    Average weight per month label, in the order labels are first seen.

    Buckets are keyed by month name only, so January 2024 and January 2025
    share one bucket.
    """
    buckets: dict[str, list[float]] = {}
    for record in records:
        weight = parse_float(record.get("weight"))
        if not math.isfinite(weight):
            continue
        label = MONTH_LABELS[_record_date(record["date"]).month - 1]
        bucket = buckets.setdefault(label, [0.0, 0])
        bucket[0] += weight
        bucket[1] += 1

    series = []
    for label, (total, count) in buckets.items():
        mean = total / count
        series.append(WeightPoint(month=label, weight=round1(mean), body_fat=estimate_body_fat(mean)))
    return series


def normalize_metrics(row: Mapping[str, Any] | None) -> dict[str, float]:
    if row is None:
        return {field: 0.0 for field in METRIC_FIELDS}
    return {field: float_or_zero(row.get(field)) for field in METRIC_FIELDS}


def radar_data(metrics: Mapping[str, float]) -> list[RadarPoint]:
    return [RadarPoint(metric=REGION_LABELS[f], value=metrics.get(f, 0.0)) for f in REGION_FIELDS]


# ---------- Aggregator ----------

class ProgressAggregator:
    """
    Builds the progress dashboard for one user and applies the dashboard's
    two mutations (photo upload, metric edit). Every fetch is a full reload
    from the store; nothing is cached between calls.

    Store failures never escape: they are logged and the affected piece of
    the view falls back to its empty/zero default.
    """

    def __init__(
        self,
        store: ProgressStore,
        clock: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], None] = time.sleep,
        analysis_delay: float | None = None,
    ):
        self.store = store
        self.clock = clock
        self.sleep = sleep
        self.analysis_delay = (
            settings.PHOTO_ANALYSIS_DELAY_SECONDS if analysis_delay is None else analysis_delay
        )

    def today(self) -> date:
        return self.clock().date()

    # --- reads

    def load_month_photos(self, user_id: str) -> list[MonthPhoto]:
        photos = []
        for month, year in photo_history_keys(self.today(), settings.PHOTO_HISTORY_MONTHS):
            try:
                row = self.store.get_photo(user_id, month, year)
            except StoreError as exc:
                logger.warning("Photo lookup failed for %s %s/%s: %s", user_id, month, year, exc.message)
                row = None
            photos.append(MonthPhoto(month=month, year=year, photo_url=(row or {}).get("photo_url") or None))
        return photos

    def load_metrics_row(self, user_id: str, month: int, year: int) -> dict[str, Any] | None:
        try:
            return self.store.get_metrics(user_id, month, year)
        except StoreError as exc:
            logger.warning("Body metrics lookup failed for %s %s/%s: %s", user_id, month, year, exc.message)
            return None

    def load_weight_series(self, user_id: str) -> list[WeightPoint]:
        since = weight_history_start(self.today(), settings.WEIGHT_HISTORY_MONTHS)
        try:
            records = self.store.list_weight_records_since(user_id, since)
        except StoreError as exc:
            logger.warning("Weight history lookup failed for %s: %s", user_id, exc.message)
            return []
        return aggregate_weight_series(records)

    def photo_for_month(self, user_id: str, month: int, year: int) -> str | None:
        try:
            row = self.store.get_photo(user_id, month, year)
        except StoreError as exc:
            logger.warning("Photo lookup failed for %s %s/%s: %s", user_id, month, year, exc.message)
            return None
        return (row or {}).get("photo_url") or None

    def fetch(self, user_id: str, month: int, year: int) -> ProgressView:
        month_photos = self.load_month_photos(user_id)
        total_photos = sum(1 for p in month_photos if p.photo_url)

        metrics_row = self.load_metrics_row(user_id, month, year)
        metrics = normalize_metrics(metrics_row)

        progress_data = self.load_weight_series(user_id)

        return ProgressView(
            user_id=user_id,
            month=month,
            year=year,
            month_photos=month_photos,
            total_photos=total_photos,
            has_metrics=metrics_row is not None,
            metrics=metrics,
            radar=radar_data(metrics),
            progress_data=progress_data,
            feedback=select_feedback(metrics_row, total_photos, month, year),
        )

    # --- mutations

    def upload_photo(self, user_id: str, photo_url: str, month: int, year: int) -> PhotoUploadResult:
        """
        Save a progress photo for the current calendar month after the
        simulated analysis pause, then reload the view for (month, year).
        """
        transitions = [UploadState.PROCESSING]
        self.sleep(self.analysis_delay)

        now = self.clock()
        try:
            self.store.upsert_photo(user_id, now.month, now.year, photo_url, now)
        except StoreError as exc:
            logger.error("Failed to save progress photo for %s: %s", user_id, exc.message)
            transitions.append(UploadState.IDLE)
            return PhotoUploadResult(saved=False, state=UploadState.IDLE, transitions=transitions)

        transitions.append(UploadState.SAVED)
        logger.info("Progress photo saved for %s (%s/%s)", user_id, now.month, now.year)
        view = self.fetch(user_id, month, year)
        transitions.append(UploadState.IDLE)
        return PhotoUploadResult(saved=True, state=UploadState.SAVED, transitions=transitions, view=view)

    def update_metric(self, user_id: str, month: int, year: int, field: str, value: float) -> ProgressView:
        if field not in METRIC_FIELDS:
            raise ValueError(f"Unknown body metric: {field}")

        values = normalize_metrics(self.load_metrics_row(user_id, month, year))
        values[field] = value
        try:
            self.store.upsert_metrics(user_id, month, year, values)
        except StoreError as exc:
            logger.error("Failed to update %s for %s %s/%s: %s", field, user_id, month, year, exc.message)

        return self.fetch(user_id, month, year)
