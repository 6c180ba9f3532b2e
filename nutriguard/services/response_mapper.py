"""
Validation and mapping of raw inference payloads into typed results.

parse_payload() is shared by all three operations, each passing the schema
class its request names: empty payloads raise EmptyResponseError, anything
that is not a JSON object matching the schema raises MalformedResponseError. Whether those errors are absorbed is decided
by the caller (only risk analysis has a fallback).
"""

import json
import logging
import re
from datetime import datetime, timezone
from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError

from nutriguard.services.ai_schemas import (
    AiDietPlan,
    AnalysisResult,
    DietPlanSchema,
    NutrientInfo,
    RiskLevel,
)
from nutriguard.services.exceptions import EmptyResponseError, MalformedResponseError
from nutriguard.services.rule_store import Locale

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def _strip_markdown_json(text: str) -> str:
    """Strip markdown code block wrappers from JSON text."""
    if "```json" in text:
        text = text.split("```json")[1].split("```")[0].strip()
    elif "```" in text:
        text = text.split("```")[1].split("```")[0].strip()
    return text


def _fix_trailing_commas(text: str) -> str:
    """Fix trailing commas in JSON (common LLM error)."""
    text = re.sub(r",\s*}", "}", text)
    text = re.sub(r",\s*]", "]", text)
    return text


def parse_payload(raw: Optional[str], schema_class: type[SchemaT]) -> SchemaT:
    """
    Parse a raw text payload and validate it against ``schema_class``.

    Raises:
        EmptyResponseError: Payload is missing or blank
        MalformedResponseError: Not JSON, not an object, or fails validation
    """
    if raw is None or not raw.strip():
        raise EmptyResponseError("No text content in AI response")

    json_str = _fix_trailing_commas(_strip_markdown_json(raw.strip()))

    try:
        parsed = json.loads(json_str)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"AI response is not valid JSON: {e}") from e

    if not isinstance(parsed, dict):
        raise MalformedResponseError(
            f"AI response must be a JSON object, got {type(parsed).__name__}"
        )

    try:
        return schema_class.model_validate(parsed)
    except ValidationError as e:
        logger.warning(
            "AI response schema validation failed for %s: %s",
            schema_class.__name__,
            e,
        )
        raise MalformedResponseError(
            f"AI response failed schema validation: {e}"
        ) from e


def stamp_diet_plan(
    plan: DietPlanSchema, generated_at: Optional[datetime] = None
) -> AiDietPlan:
    """Stamp a validated care plan with the local generation time."""
    return AiDietPlan(
        **plan.model_dump(),
        generated_at=generated_at or datetime.now(timezone.utc),
    )


# =============================================================================
# RISK ANALYSIS FALLBACK
# =============================================================================

FALLBACK_TEXT = {
    Locale.EN: {
        "food_name": "Analysis Failed",
        "risk_reason": "Could not process image.",
        "detailed_analysis": (
            "Please try again with a clearer photo. "
            "Ensure you have internet connection."
        ),
    },
    Locale.ZH: {
        "food_name": "分析失败",
        "risk_reason": "无法处理图片",
        "detailed_analysis": "请重试清晰的照片。确保网络连接正常。",
    },
}

FALLBACK_PORTION = "N/A"


def fallback_analysis_result(locale: Locale) -> AnalysisResult:
    """Neutral placeholder returned when risk analysis cannot complete."""
    text = FALLBACK_TEXT[Locale(locale)]
    return AnalysisResult(
        food_name=text["food_name"],
        risk_level=RiskLevel.UNKNOWN,
        risk_reason=text["risk_reason"],
        triggered_conditions=[],
        detailed_analysis=text["detailed_analysis"],
        portion_recommendation=FALLBACK_PORTION,
        alternatives=[],
        nutrients=NutrientInfo(calories=0, carbs=0, protein=0, fat=0, sugar=0, sodium=0),
    )
