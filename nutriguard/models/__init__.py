"""
Database models for NutriGuard.

Import all models here so create_all() can see them.
"""

from nutriguard.database import Base
from nutriguard.models.scan_record import ScanRecordRow

__all__ = [
    "Base",
    "ScanRecordRow",
]
