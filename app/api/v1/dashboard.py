# app/api/v1/dashboard.py

import logging
import math
from typing import Callable, ContextManager

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.api.deps import get_admin_store_factory
from app.core.parsing import parse_float
from app.core.store import ProgressStore, Row, StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])

INCOMPLETE_DATA = "incomplete data"
INTERNAL_ERROR = "internal server error"


def _json_safe(row: dict) -> dict:
    # JSON has no NaN/Infinity
    return {
        k: (None if isinstance(v, float) and not math.isfinite(v) else v)
        for k, v in row.items()
    }


def _insert_weight(
    open_store: Callable[[], ContextManager[ProgressStore]],
    user_id: str,
    weight: float,
    record_date,
) -> Row:
    with open_store() as store:
        return store.insert_weight_record(user_id, weight, record_date)


@router.post("/weight")
async def create_weight_record(
    request: Request,
    open_admin_store: Callable[[], ContextManager[ProgressStore]] = Depends(get_admin_store_factory),
):
    """
    Record a weigh-in: {userId, weight, date}.

    Writes through the elevated store, so the only gate is the presence check
    below. weight is parsed leniently; a value with no numeric prefix is
    stored as NaN.
    """
    try:
        payload = await request.json()
        if not isinstance(payload, dict):
            payload = {}

        user_id = payload.get("userId")
        weight = payload.get("weight")
        record_date = payload.get("date")

        if not user_id or not weight or not record_date:
            return JSONResponse({"error": INCOMPLETE_DATA}, status_code=400)

        try:
            row = await run_in_threadpool(
                _insert_weight, open_admin_store, str(user_id), parse_float(weight), record_date
            )
        except StoreError as exc:
            logger.error("Failed to insert weight record: %s", exc.message)
            return JSONResponse({"error": exc.message}, status_code=500)

        return JSONResponse({"data": _json_safe(row)}, status_code=200)
    except Exception:
        logger.exception("Unexpected error while recording weight")
        return JSONResponse({"error": INTERNAL_ERROR}, status_code=500)
