"""
Claude AI integration service: the inference boundary for all AI features.

This service provides three core AI capabilities:
1. Food risk analysis from a single photo (degrades to a fallback result)
2. Care plan generation from the user's conditions
3. Recipe generation from one or more ingredient photos

Every operation makes exactly one API call. Nothing is retried; errors from
care plan and recipe generation propagate to the caller.
"""

import logging
from functools import lru_cache
from typing import Any, Optional, Sequence

import anthropic
import httpx
from anthropic import AsyncAnthropic

from nutriguard.config import settings
from nutriguard.services.ai_schemas import AiDietPlan, AnalysisResult, ChefResponse
from nutriguard.services.exceptions import (
    EmptyResponseError,
    MissingCredentialError,
    RateLimitError,
    ServiceUnavailableError,
)
from nutriguard.services.generation_contract import (
    GenerationRequest,
    ImagePart,
    build_care_plan_request,
    build_recipe_request,
    build_risk_analysis_request,
)
from nutriguard.services.response_mapper import (
    fallback_analysis_result,
    parse_payload,
    stamp_diet_plan,
)
from nutriguard.services.rule_store import Locale

logger = logging.getLogger(__name__)

# Assistant prefill so the model starts straight into the JSON object
PREFILL = "{"


class ClaudeService:
    """Centralized Claude API integration for all AI features."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None):
        timeout = httpx.Timeout(
            timeout=settings.anthropic_timeout,
            connect=settings.anthropic_connect_timeout,
        )
        self.api_key = settings.anthropic_api_key if api_key is None else api_key
        self.client = AsyncAnthropic(api_key=self.api_key, timeout=timeout)
        self.model = model or settings.vision_model

    def _require_credential(self) -> None:
        if not self.api_key:
            raise MissingCredentialError(
                "No Anthropic API key configured (set ANTHROPIC_API_KEY)"
            )

    # =========================================================================
    # RAW CALL
    # =========================================================================

    async def generate(self, request: GenerationRequest) -> str:
        """
        Send one structured-generation request and return the raw JSON text.

        Returns:
            The model's text with the prefill restored, so it parses as JSON

        Raises:
            MissingCredentialError: No API key configured (no call is made)
            ServiceUnavailableError: Connection failure, timeout or 5xx
            RateLimitError: Too many requests
            EmptyResponseError: Response contained no text
            ValueError: Other request errors (4xx)
        """
        self._require_credential()

        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=request.max_tokens,
                system=request.system_prompt,
                messages=[
                    {"role": "user", "content": request.to_message_content()},
                    {"role": "assistant", "content": PREFILL},
                ],
            )
        except anthropic.APIConnectionError as e:
            logger.warning("%s: connection error: %s", request.operation.value, e)
            raise ServiceUnavailableError("AI service temporarily unavailable") from e
        except anthropic.RateLimitError as e:
            raise RateLimitError(
                "Too many requests, please try again in 1 minute"
            ) from e
        except anthropic.APIStatusError as e:
            if e.status_code >= 500:
                raise ServiceUnavailableError("AI service error") from e
            raise ValueError(f"Request error: {e.message}") from e

        response_text = ""
        for block in response.content:
            if hasattr(block, "text"):
                response_text += block.text

        if not response_text.strip():
            raise EmptyResponseError("No text content in AI response")

        return PREFILL + response_text.strip()

    async def generate_structured(self, request: GenerationRequest) -> Any:
        """
        Send a request and validate the reply against ``request.schema_class``.

        Raises:
            Everything generate() raises, plus MalformedResponseError
        """
        raw = await self.generate(request)
        return parse_payload(raw, request.schema_class)

    # =========================================================================
    # FOOD RISK ANALYSIS
    # =========================================================================

    async def analyze_food_image(
        self, image: ImagePart, condition_ids: Sequence[str], locale: Locale
    ) -> AnalysisResult:
        """
        Classify one food photo for the user's conditions.

        Any failure after the credential check (transport, empty or malformed
        payload) yields the locale's fallback result instead of an exception.

        Raises:
            MissingCredentialError: No API key configured
        """
        self._require_credential()
        request = build_risk_analysis_request(image, condition_ids, locale)

        try:
            return await self.generate_structured(request)
        except Exception as e:
            logger.warning("Food analysis failed, returning fallback result: %s", e)
            return fallback_analysis_result(request.locale)

    # =========================================================================
    # CARE PLAN
    # =========================================================================

    async def generate_diet_plan(
        self, condition_ids: Sequence[str], locale: Locale
    ) -> AiDietPlan:
        """
        One-day meal plan, workout routine and guidelines for the conditions.

        Raises:
            MissingCredentialError, ServiceUnavailableError, RateLimitError,
            EmptyResponseError, MalformedResponseError, ValueError
        """
        request = build_care_plan_request(condition_ids, locale)
        return stamp_diet_plan(await self.generate_structured(request))

    # =========================================================================
    # RECIPE GENERATION
    # =========================================================================

    async def generate_recipes(
        self, images: Sequence[ImagePart], condition_ids: Sequence[str], locale: Locale
    ) -> ChefResponse:
        """
        Breakfast, lunch and dinner recipes from photographed ingredients.

        Raises:
            ValueError: No images supplied, or a 4xx request error
            MissingCredentialError, ServiceUnavailableError, RateLimitError,
            EmptyResponseError, MalformedResponseError
        """
        request = build_recipe_request(images, condition_ids, locale)
        return await self.generate_structured(request)


@lru_cache(maxsize=1)
def get_claude_service() -> ClaudeService:
    """Shared service instance (FastAPI dependency)."""
    return ClaudeService()
