import logging

from fastapi import APIRouter
from sqlalchemy import text

from app.core.config import settings
from app.core.db import engine

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


def _db_reachable() -> bool:
    if engine is None:
        return False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except Exception as exc:
        logger.warning("Database health probe failed: %s", exc)
        return False
    return True


@router.get("/health")
def health():
    if settings.STORE_BACKEND == "supabase":
        store_ready = bool(settings.SUPABASE_URL and settings.SUPABASE_ANON_KEY)
    else:
        store_ready = _db_reachable()

    return {
        "status": "ok" if store_ready else "degraded",
        "environment": settings.ENVIRONMENT,
        "store": settings.STORE_BACKEND,
        "db": store_ready,
    }
