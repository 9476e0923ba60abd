from fastapi import FastAPI

from app.core.db import Base, engine
from app.core.logging_config import setup_logging
from app.api.v1.health import router as health_router
from app.api.v1.dashboard import router as dashboard_router
from app.api.v1.progress import router as progress_router

# register tables on Base.metadata
from app import models  # noqa: F401

setup_logging()

app = FastAPI(title="Progress Dashboard", version="1.0.0")

if engine:
    Base.metadata.create_all(bind=engine)

app.include_router(health_router, prefix="/v1")
app.include_router(dashboard_router, prefix="/v1")
app.include_router(progress_router, prefix="/v1")
