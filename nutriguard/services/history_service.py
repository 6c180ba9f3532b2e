"""Bounded, most-recent-first history of food scans."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from nutriguard.config import settings
from nutriguard.models.scan_record import ScanRecordRow
from nutriguard.services.ai_schemas import AnalysisResult
from nutriguard.services.file_service import file_service

logger = logging.getLogger(__name__)


class ScanRecord(BaseModel):
    """A completed analysis as handed to the history. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    image_ref: Optional[str] = None
    result: AnalysisResult


def create_scan_record(result: AnalysisResult, image_ref: Optional[str] = None) -> ScanRecord:
    return ScanRecord(
        id=str(uuid.uuid4()),
        timestamp=datetime.now(timezone.utc),
        image_ref=image_ref,
        result=result,
    )


def _to_record(row: ScanRecordRow) -> ScanRecord:
    timestamp = row.timestamp
    # SQLite hands DateTime back without tzinfo; stored values are UTC
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=timezone.utc)
    return ScanRecord(
        id=row.id,
        timestamp=timestamp,
        image_ref=row.image_ref,
        result=AnalysisResult.model_validate(row.result),
    )


class ScanHistoryService:
    """Persists scan records, keeping only the newest ``limit`` entries."""

    def __init__(self, limit: Optional[int] = None):
        self.limit = settings.history_limit if limit is None else limit

    def append(self, db: Session, record: ScanRecord) -> ScanRecord:
        """
        Add a record and drop everything older than the newest ``limit``.

        Image files belonging to dropped records are deleted once the commit
        has succeeded.
        """
        db.add(
            ScanRecordRow(
                id=record.id,
                timestamp=record.timestamp,
                image_ref=record.image_ref,
                result=record.result.model_dump(mode="json"),
            )
        )
        db.flush()

        stale = (
            db.query(ScanRecordRow)
            .order_by(ScanRecordRow.seq.desc())
            .offset(self.limit)
            .all()
        )
        image_refs = [row.image_ref for row in stale if row.image_ref]
        for row in stale:
            db.delete(row)

        db.commit()

        if stale:
            logger.debug("Trimmed %d scan record(s) beyond limit %d", len(stale), self.limit)
        self._delete_images(image_refs)
        return record

    def list_recent(self, db: Session, limit: Optional[int] = None) -> list[ScanRecord]:
        query = db.query(ScanRecordRow).order_by(ScanRecordRow.seq.desc())
        if limit is not None:
            query = query.limit(limit)
        return [_to_record(row) for row in query.all()]

    def get(self, db: Session, record_id: str) -> Optional[ScanRecord]:
        row = db.query(ScanRecordRow).filter(ScanRecordRow.id == record_id).first()
        return _to_record(row) if row else None

    def clear(self, db: Session) -> int:
        """Delete every record. Returns how many were removed."""
        rows = db.query(ScanRecordRow).all()
        image_refs = [row.image_ref for row in rows if row.image_ref]
        for row in rows:
            db.delete(row)
        db.commit()

        self._delete_images(image_refs)
        return len(rows)

    def _delete_images(self, image_refs: list[str]) -> None:
        for image_ref in image_refs:
            file_service.delete_file(image_ref)


# Singleton instance
history_service = ScanHistoryService()
