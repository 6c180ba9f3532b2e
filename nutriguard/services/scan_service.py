"""Food scan flow: analyze one photo and record the result in history."""

from typing import Sequence

from sqlalchemy.orm import Session

from nutriguard.services.ai_service import ClaudeService
from nutriguard.services.file_service import FileService, file_service
from nutriguard.services.history_service import (
    ScanHistoryService,
    ScanRecord,
    create_scan_record,
    history_service,
)
from nutriguard.services.rule_store import Locale


async def scan_food(
    db: Session,
    ai: ClaudeService,
    image_bytes: bytes,
    condition_ids: Sequence[str],
    locale: Locale,
    files: FileService = file_service,
    history: ScanHistoryService = history_service,
) -> ScanRecord:
    """
    Analyze a food photo and append the outcome to the scan history.

    Fallback results are recorded like any other result.

    Raises:
        ValueError: Image bytes are not a readable image
        MissingCredentialError: No API key configured
    """
    image = files.prepare_image(image_bytes)
    result = await ai.analyze_food_image(image, condition_ids, locale)
    image_ref = files.save_scan_image(image)
    record = create_scan_record(result, image_ref)
    return history.append(db, record)
