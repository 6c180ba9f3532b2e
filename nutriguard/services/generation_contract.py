"""
Request builders for the three inference operations.

Each builder pairs a natural-language instruction (task framing, the user's
condition names, the consolidated guidance text and a locale directive) with
a strict output schema. Builders are pure: no I/O, no client, no state. The
resulting GenerationRequest is handed to ClaudeService.generate().
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence

from nutriguard.config import settings
from nutriguard.services.ai_schemas import AnalysisResult, ChefResponse, DietPlanSchema
from nutriguard.services.guidelines import build_guidance_text, format_condition_names
from nutriguard.services.llm_schema import (
    ANALYSIS_OUTPUT_SCHEMA,
    CHEF_OUTPUT_SCHEMA,
    DIET_PLAN_OUTPUT_SCHEMA,
)
from nutriguard.services.prompts import (
    CARE_PLAN_ROLE_PROMPT,
    CARE_PLAN_TASK,
    NO_CONDITIONS_LABEL,
    RECIPE_ROLE_PROMPT,
    RECIPE_TASK,
    RISK_ANALYSIS_ROLE_PROMPT,
    RISK_ANALYSIS_TASK,
    build_system_prompt,
    locale_directive,
)
from nutriguard.services.rule_store import ClinicalRuleStore, Locale


class Operation(str, Enum):
    RISK_ANALYSIS = "risk_analysis"
    CARE_PLAN = "care_plan"
    RECIPE = "recipe"


@dataclass(frozen=True)
class ImagePart:
    """Encoded image bytes plus the media type the API should be told."""

    data: bytes
    media_type: str

    def to_content_block(self) -> dict:
        return {
            "type": "image",
            "source": {
                "type": "base64",
                "media_type": self.media_type,
                "data": base64.standard_b64encode(self.data).decode("utf-8"),
            },
        }


@dataclass(frozen=True)
class GenerationRequest:
    operation: Operation
    system_prompt: str
    instruction: str
    output_schema: dict
    schema_class: type
    locale: Locale
    condition_names: str
    guidance: str
    max_tokens: int
    images: tuple[ImagePart, ...] = field(default_factory=tuple)

    def to_message_content(self) -> list[dict]:
        """Anthropic user-message content: images first, then the instruction."""
        blocks = [image.to_content_block() for image in self.images]
        blocks.append({"type": "text", "text": self.instruction})
        return blocks


def _grounding(condition_ids: Sequence[str], store: Optional[ClinicalRuleStore]) -> tuple[str, str]:
    names = format_condition_names(condition_ids, store)
    guidance = build_guidance_text(condition_ids, store)
    return names, guidance


def build_risk_analysis_request(
    image: ImagePart,
    condition_ids: Sequence[str],
    locale: Locale,
    store: Optional[ClinicalRuleStore] = None,
) -> GenerationRequest:
    """One food photo -> AnalysisResult."""
    locale = Locale(locale)
    names, guidance = _grounding(condition_ids, store)
    instruction = RISK_ANALYSIS_TASK.format(
        condition_names=names or NO_CONDITIONS_LABEL,
        guidance=guidance,
        locale_directive=locale_directive(locale),
    )
    return GenerationRequest(
        operation=Operation.RISK_ANALYSIS,
        system_prompt=build_system_prompt(RISK_ANALYSIS_ROLE_PROMPT, ANALYSIS_OUTPUT_SCHEMA),
        instruction=instruction,
        output_schema=ANALYSIS_OUTPUT_SCHEMA,
        schema_class=AnalysisResult,
        locale=locale,
        condition_names=names,
        guidance=guidance,
        max_tokens=settings.analysis_max_tokens,
        images=(image,),
    )


def build_care_plan_request(
    condition_ids: Sequence[str],
    locale: Locale,
    store: Optional[ClinicalRuleStore] = None,
) -> GenerationRequest:
    """Condition set only (no image) -> AiDietPlan."""
    locale = Locale(locale)
    names, guidance = _grounding(condition_ids, store)
    instruction = CARE_PLAN_TASK.format(
        condition_names=names or NO_CONDITIONS_LABEL,
        guidance=guidance,
        locale_directive=locale_directive(locale),
    )
    return GenerationRequest(
        operation=Operation.CARE_PLAN,
        system_prompt=build_system_prompt(CARE_PLAN_ROLE_PROMPT, DIET_PLAN_OUTPUT_SCHEMA),
        instruction=instruction,
        output_schema=DIET_PLAN_OUTPUT_SCHEMA,
        schema_class=DietPlanSchema,
        locale=locale,
        condition_names=names,
        guidance=guidance,
        max_tokens=settings.plan_max_tokens,
    )


def build_recipe_request(
    images: Sequence[ImagePart],
    condition_ids: Sequence[str],
    locale: Locale,
    store: Optional[ClinicalRuleStore] = None,
) -> GenerationRequest:
    """
    One or more ingredient photos -> ChefResponse.

    Raises:
        ValueError: If no image is supplied
    """
    if not images:
        raise ValueError("Recipe generation needs at least one image")

    locale = Locale(locale)
    names, guidance = _grounding(condition_ids, store)
    instruction = RECIPE_TASK.format(
        image_count=len(images),
        condition_names=names or NO_CONDITIONS_LABEL,
        guidance=guidance,
        locale_directive=locale_directive(locale),
    )
    return GenerationRequest(
        operation=Operation.RECIPE,
        system_prompt=build_system_prompt(RECIPE_ROLE_PROMPT, CHEF_OUTPUT_SCHEMA),
        instruction=instruction,
        output_schema=CHEF_OUTPUT_SCHEMA,
        schema_class=ChefResponse,
        locale=locale,
        condition_names=names,
        guidance=guidance,
        max_tokens=settings.recipe_max_tokens,
        images=tuple(images),
    )
