from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Integer, String

from app.core.db import Base


class WeightRecord(Base):
    """
    One weigh-in for a user on a calendar date.
    Several entries for the same user and date are allowed.
    """

    __tablename__ = "weight_records"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)

    weight = Column(Float)             # kg
    date = Column(Date, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
