# app/models/body_metrics.py

from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String, UniqueConstraint

from app.core.db import Base

# Order matters: it is the order the dashboard renders and upserts them in.
METRIC_FIELDS = (
    "weight_lost",
    "body_fat_reduced",
    "muscle_gained",
    "arms",
    "chest",
    "back",
    "abdomen",
    "legs",
)

REGION_FIELDS = ("arms", "chest", "back", "abdomen", "legs")


class BodyMetrics(Base):
    """
    User-entered body-composition deltas for one calendar month.
    Exactly one row per (user, month, year).
    """

    __tablename__ = "body_metrics"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_body_metrics_user_month_year"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    # Composition deltas for the month
    weight_lost = Column(Float, default=0)
    body_fat_reduced = Column(Float, default=0)
    muscle_gained = Column(Float, default=0)

    # Regional development, 0-100
    arms = Column(Float, default=0)
    chest = Column(Float, default=0)
    back = Column(Float, default=0)
    abdomen = Column(Float, default=0)
    legs = Column(Float, default=0)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
