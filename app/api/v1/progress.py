# app/api/v1/progress.py

import base64
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from pydantic import BaseModel, Field

from app.api.deps import get_aggregator
from app.core.config import settings
from app.core.progress import PhotoUploadResult, ProgressAggregator, ProgressView
from app.models.body_metrics import METRIC_FIELDS

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/progress", tags=["progress"])


# ---------- Pydantic schemas ----------

class MetricUpdateIn(BaseModel):
    value: float
    month: int | None = Field(default=None, ge=1, le=12)
    year: int | None = None


class MonthPhotoOut(BaseModel):
    month: int
    year: int
    photo_url: str


def _resolve_month(aggregator: ProgressAggregator, month: int | None, year: int | None):
    today = aggregator.today()
    return (month or today.month, year or today.year)


# ---------- Endpoints ----------

@router.get("/{user_id}", response_model=ProgressView)
def get_progress(
    user_id: str,
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None),
    aggregator: ProgressAggregator = Depends(get_aggregator),
):
    """
    Dashboard view for one month: 12-month photo history, that month's body
    metrics, the trailing weight series and the feedback line.
    Defaults to the current month.
    """
    month, year = _resolve_month(aggregator, month, year)
    return aggregator.fetch(user_id, month, year)


@router.post("/{user_id}/photos", response_model=PhotoUploadResult)
def upload_progress_photo(
    user_id: str,
    file: UploadFile = File(...),
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None),
    aggregator: ProgressAggregator = Depends(get_aggregator),
):
    """
    Upload this month's progress photo. The photo is always filed under the
    current calendar month; month/year only pick which view is returned.
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(status_code=400, detail="Only image uploads are accepted")

    content = file.file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file")
    if len(content) > settings.MAX_PHOTO_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File size exceeds {settings.MAX_PHOTO_SIZE_MB}MB limit",
        )

    photo_url = f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"
    month, year = _resolve_month(aggregator, month, year)
    return aggregator.upload_photo(user_id, photo_url, month, year)


@router.get("/{user_id}/photos/{year}/{month}", response_model=MonthPhotoOut)
def get_month_photo(
    user_id: str,
    year: int,
    month: int,
    aggregator: ProgressAggregator = Depends(get_aggregator),
):
    if not 1 <= month <= 12:
        raise HTTPException(status_code=400, detail="Invalid month, expected 1-12")

    photo_url = aggregator.photo_for_month(user_id, month, year)
    if not photo_url:
        raise HTTPException(status_code=404, detail="No progress photo for this month")
    return MonthPhotoOut(month=month, year=year, photo_url=photo_url)


@router.put("/{user_id}/metrics/{field}", response_model=ProgressView)
def update_body_metric(
    user_id: str,
    field: str,
    payload: MetricUpdateIn,
    aggregator: ProgressAggregator = Depends(get_aggregator),
):
    """Set one body-metric field for a month and return the refreshed view."""
    if field not in METRIC_FIELDS:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown metric '{field}', expected one of: {', '.join(METRIC_FIELDS)}",
        )

    month, year = _resolve_month(aggregator, payload.month, payload.year)
    return aggregator.update_metric(user_id, month, year, field, payload.value)
