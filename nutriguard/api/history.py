"""API endpoints for the scan history."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from nutriguard.database import get_db
from nutriguard.services.history_service import ScanRecord, history_service

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=list[ScanRecord])
async def list_history(limit: Optional[int] = None, db: Session = Depends(get_db)):
    """Most recent scans first."""
    return history_service.list_recent(db, limit=limit)


@router.get("/{record_id}", response_model=ScanRecord)
async def get_record(record_id: str, db: Session = Depends(get_db)):
    record = history_service.get(db, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Scan record not found")
    return record


@router.delete("")
async def clear_history(db: Session = Depends(get_db)):
    removed = history_service.clear(db)
    return {"removed": removed}
