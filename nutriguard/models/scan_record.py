"""ScanRecordRow model for the bounded food-scan history."""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON
from nutriguard.database import Base


class ScanRecordRow(Base):
    """One completed food risk analysis. Rows are never updated."""

    __tablename__ = "scan_records"

    # Insertion order; newest first is ORDER BY seq DESC
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(36), unique=True, index=True, nullable=False)
    timestamp = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    image_ref = Column(String, nullable=True)  # Saved image path

    # AnalysisResult as JSON
    result = Column(JSON, nullable=False)

    def __repr__(self):
        return f"<ScanRecordRow(id={self.id}, timestamp={self.timestamp})>"
