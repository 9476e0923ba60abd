from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String, Text, UniqueConstraint

from app.core.db import Base


class ProgressPhoto(Base):
    __tablename__ = "progress_photos"
    __table_args__ = (
        UniqueConstraint("user_id", "month", "year", name="uq_progress_photo_user_month_year"),
    )

    id = Column(Integer, primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False)

    # data: URL or storage URL; may be null
    photo_url = Column(Text)

    created_at = Column(DateTime, default=datetime.utcnow)
