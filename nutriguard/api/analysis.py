"""API endpoints for the three AI operations: food scan, care plan, recipes."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import BaseModel
from sqlalchemy.orm import Session

from nutriguard.config import settings
from nutriguard.database import get_db
from nutriguard.services.ai_schemas import AiDietPlan, ChefResponse
from nutriguard.services.ai_service import ClaudeService, get_claude_service
from nutriguard.services.file_service import file_service
from nutriguard.services.history_service import ScanRecord
from nutriguard.services.rule_store import Locale
from nutriguard.services.scan_service import scan_food

router = APIRouter(prefix="/analysis", tags=["analysis"])


class CarePlanRequest(BaseModel):
    conditions: list[str] = []
    locale: Optional[Locale] = None


def _locale(locale: Optional[Locale]) -> Locale:
    return locale or Locale(settings.default_locale)


@router.post("/scan", response_model=ScanRecord)
async def scan(
    image: UploadFile = File(...),
    conditions: list[str] = Form([]),
    locale: Optional[Locale] = Form(None),
    ai: ClaudeService = Depends(get_claude_service),
    db: Session = Depends(get_db),
):
    """
    Assess one food photo against the user's conditions.

    Always returns a result once the request is accepted: if the AI call fails
    the record carries the UNKNOWN fallback. The record is added to history.
    """
    contents = await image.read()
    try:
        return await scan_food(
            db=db,
            ai=ai,
            image_bytes=contents,
            condition_ids=conditions,
            locale=_locale(locale),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/care-plan", response_model=AiDietPlan)
async def care_plan(
    body: CarePlanRequest,
    ai: ClaudeService = Depends(get_claude_service),
):
    """Generate a one-day care plan. AI failures surface as 5xx/429 errors."""
    try:
        return await ai.generate_diet_plan(body.conditions, _locale(body.locale))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/recipes", response_model=ChefResponse)
async def recipes(
    images: list[UploadFile] = File(...),
    conditions: list[str] = Form([]),
    locale: Optional[Locale] = Form(None),
    ai: ClaudeService = Depends(get_claude_service),
):
    """Three recipes (breakfast, lunch, dinner) from photographed ingredients."""
    try:
        parts = [file_service.prepare_image(await upload.read()) for upload in images]
        return await ai.generate_recipes(parts, conditions, _locale(locale))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
