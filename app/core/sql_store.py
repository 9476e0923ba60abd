import logging
from datetime import date, datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.store import ProgressStore, Row, StoreError
from app.models.body_metrics import BodyMetrics, METRIC_FIELDS
from app.models.progress_photo import ProgressPhoto
from app.models.weight import WeightRecord

logger = logging.getLogger(__name__)


def _weight_row(entry: WeightRecord) -> Row:
    return {
        "id": entry.id,
        "user_id": entry.user_id,
        "weight": entry.weight,
        "date": entry.date.isoformat() if entry.date else None,
        "created_at": entry.created_at.isoformat() if entry.created_at else None,
    }


def _photo_row(photo: ProgressPhoto) -> Row:
    return {
        "id": photo.id,
        "user_id": photo.user_id,
        "month": photo.month,
        "year": photo.year,
        "photo_url": photo.photo_url,
        "created_at": photo.created_at.isoformat() if photo.created_at else None,
    }


def _metrics_row(metrics: BodyMetrics) -> Row:
    row = {
        "id": metrics.id,
        "user_id": metrics.user_id,
        "month": metrics.month,
        "year": metrics.year,
        "updated_at": metrics.updated_at.isoformat() if metrics.updated_at else None,
    }
    for field in METRIC_FIELDS:
        row[field] = getattr(metrics, field)
    return row


class SqlProgressStore(ProgressStore):
    """ProgressStore over a SQLAlchemy session (PostgreSQL, SQLite in tests)."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, action: str, exc: SQLAlchemyError) -> StoreError:
        self.db.rollback()
        message = str(getattr(exc, "orig", None) or exc)
        logger.error("Failed to %s: %s", action, message)
        return StoreError(message)

    def insert_weight_record(self, user_id: str, weight: float, record_date: date | str) -> Row:
        if isinstance(record_date, date):
            day = record_date
        else:
            try:
                day = date.fromisoformat(str(record_date)[:10])
            except ValueError:
                logger.error("Rejected weight record date %r", record_date)
                raise StoreError(f'invalid input syntax for type date: "{record_date}"')

        entry = WeightRecord(user_id=user_id, weight=weight, date=day, created_at=datetime.utcnow())
        try:
            self.db.add(entry)
            self.db.flush()
            # captured before commit: some backends cannot round-trip NaN
            row = _weight_row(entry)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("insert weight record", exc)
        return row

    def get_photo(self, user_id: str, month: int, year: int) -> Row | None:
        try:
            photo = (
                self.db.query(ProgressPhoto)
                .filter(
                    ProgressPhoto.user_id == user_id,
                    ProgressPhoto.month == month,
                    ProgressPhoto.year == year,
                )
                .one_or_none()
            )
        except SQLAlchemyError as exc:
            raise self._fail("load progress photo", exc)
        return _photo_row(photo) if photo else None

    def upsert_photo(
        self,
        user_id: str,
        month: int,
        year: int,
        photo_url: str | None,
        created_at: datetime,
    ) -> Row:
        try:
            photo = (
                self.db.query(ProgressPhoto)
                .filter(
                    ProgressPhoto.user_id == user_id,
                    ProgressPhoto.month == month,
                    ProgressPhoto.year == year,
                )
                .one_or_none()
            )
            if photo is None:
                photo = ProgressPhoto(user_id=user_id, month=month, year=year)
                self.db.add(photo)

            photo.photo_url = photo_url
            photo.created_at = created_at

            self.db.flush()
            row = _photo_row(photo)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("upsert progress photo", exc)
        return row

    def get_metrics(self, user_id: str, month: int, year: int) -> Row | None:
        try:
            metrics = (
                self.db.query(BodyMetrics)
                .filter(
                    BodyMetrics.user_id == user_id,
                    BodyMetrics.month == month,
                    BodyMetrics.year == year,
                )
                .one_or_none()
            )
        except SQLAlchemyError as exc:
            raise self._fail("load body metrics", exc)
        return _metrics_row(metrics) if metrics else None

    def upsert_metrics(self, user_id: str, month: int, year: int, values: dict[str, float]) -> Row:
        try:
            metrics = (
                self.db.query(BodyMetrics)
                .filter(
                    BodyMetrics.user_id == user_id,
                    BodyMetrics.month == month,
                    BodyMetrics.year == year,
                )
                .one_or_none()
            )
            if metrics is None:
                metrics = BodyMetrics(user_id=user_id, month=month, year=year)
                self.db.add(metrics)

            for field in METRIC_FIELDS:
                if field in values:
                    setattr(metrics, field, values[field])
            metrics.updated_at = datetime.utcnow()

            self.db.flush()
            row = _metrics_row(metrics)
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("upsert body metrics", exc)
        return row

    def list_weight_records_since(self, user_id: str, since: date) -> list[Row]:
        try:
            entries = (
                self.db.query(WeightRecord)
                .filter(WeightRecord.user_id == user_id, WeightRecord.date >= since)
                .order_by(WeightRecord.date.asc(), WeightRecord.id.asc())
                .all()
            )
        except SQLAlchemyError as exc:
            raise self._fail("list weight records", exc)
        return [_weight_row(e) for e in entries]
