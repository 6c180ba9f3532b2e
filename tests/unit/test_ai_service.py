"""
Unit tests for ClaudeService - testing REAL code paths with a mocked Anthropic client.

The AsyncAnthropic client is replaced so no network call is made, while the
prompt building, error mapping, response parsing and fallback logic all run
for real.
"""

import json
from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import anthropic
import pytest

from nutriguard.services.ai_schemas import DietPlanSchema, NutrientInfo, RiskLevel
from nutriguard.services.ai_service import PREFILL, ClaudeService
from nutriguard.services.exceptions import (
    EmptyResponseError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
    ServiceUnavailableError,
)
from nutriguard.services.generation_contract import build_care_plan_request
from nutriguard.services.rule_store import Locale
from tests.fixtures.mocks import (
    ANALYSIS_PAYLOAD,
    CHEF_PAYLOAD,
    DIET_PLAN_PAYLOAD,
    as_model_text,
    make_image_part,
)


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_anthropic_client():
    """Create a mock AsyncAnthropic client."""
    with patch("nutriguard.services.ai_service.AsyncAnthropic") as mock_cls:
        mock_client = MagicMock()
        mock_client.messages.create = AsyncMock()
        mock_cls.return_value = mock_client
        yield mock_client


@pytest.fixture
def claude_service(mock_anthropic_client):
    """ClaudeService with a key configured and the mocked client."""
    return ClaudeService(api_key="test-key", model="test-model")


@pytest.fixture
def keyless_service(mock_anthropic_client):
    return ClaudeService(api_key="", model="test-model")


def create_mock_response(text: str):
    """Helper to create mock API response."""
    mock_response = MagicMock()
    mock_content = MagicMock()
    mock_content.text = text
    mock_response.content = [mock_content]
    return mock_response


def _status_error(cls, status_code: int, message: str):
    mock_response = MagicMock()
    mock_response.status_code = status_code
    return cls(message=message, response=mock_response, body={})


def _sent_kwargs(client) -> dict:
    return client.messages.create.call_args.kwargs


# =============================================================================
# Raw call
# =============================================================================


class TestGenerate:
    """Tests for the single inference call and its error mapping."""

    @pytest.mark.asyncio
    async def test_prefill_restored(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            '"a": 1}'
        )
        request = build_care_plan_request(["gout"], Locale.EN)

        raw = await claude_service.generate(request)

        assert raw == '{"a": 1}'
        mock_anthropic_client.messages.create.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_request_shape(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response('"a": 1}')
        request = build_care_plan_request(["gout"], Locale.EN)

        await claude_service.generate(request)

        kwargs = _sent_kwargs(mock_anthropic_client)
        assert kwargs["model"] == "test-model"
        assert kwargs["max_tokens"] == request.max_tokens
        assert kwargs["system"] == request.system_prompt
        assert kwargs["messages"][0] == {
            "role": "user",
            "content": request.to_message_content(),
        }
        assert kwargs["messages"][1] == {"role": "assistant", "content": PREFILL}

    @pytest.mark.asyncio
    async def test_missing_credential_makes_no_call(
        self, keyless_service, mock_anthropic_client
    ):
        request = build_care_plan_request(["gout"], Locale.EN)

        with pytest.raises(MissingCredentialError):
            await keyless_service.generate(request)

        mock_anthropic_client.messages.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_connection_error(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = anthropic.APIConnectionError(
            request=MagicMock()
        )

        with pytest.raises(ServiceUnavailableError):
            await claude_service.generate(build_care_plan_request([], Locale.EN))

    @pytest.mark.asyncio
    async def test_rate_limit(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = _status_error(
            anthropic.RateLimitError, 429, "Rate limited"
        )

        with pytest.raises(RateLimitError):
            await claude_service.generate(build_care_plan_request([], Locale.EN))

    @pytest.mark.asyncio
    async def test_server_error(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = _status_error(
            anthropic.APIStatusError, 503, "Overloaded"
        )

        with pytest.raises(ServiceUnavailableError):
            await claude_service.generate(build_care_plan_request([], Locale.EN))

    @pytest.mark.asyncio
    async def test_client_error(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = _status_error(
            anthropic.APIStatusError, 400, "Bad request"
        )

        with pytest.raises(ValueError, match="Request error"):
            await claude_service.generate(build_care_plan_request([], Locale.EN))

    @pytest.mark.asyncio
    async def test_empty_text(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response("  ")

        with pytest.raises(EmptyResponseError):
            await claude_service.generate(build_care_plan_request([], Locale.EN))


class TestGenerateStructured:
    """Tests for validation against the request's schema class."""

    @pytest.mark.asyncio
    async def test_parses_into_request_schema(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            as_model_text(DIET_PLAN_PAYLOAD)
        )
        request = build_care_plan_request(["gout"], Locale.EN)

        plan = await claude_service.generate_structured(request)

        assert type(plan) is DietPlanSchema
        assert plan.meals.lunch == DIET_PLAN_PAYLOAD["meals"]["lunch"]

    @pytest.mark.asyncio
    async def test_schema_class_drives_validation(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            '"calories": 1, "carbs": 2, "protein": 3, "fat": 4, "sugar": 5, "sodium": 6}'
        )
        request = replace(build_care_plan_request([], Locale.EN), schema_class=NutrientInfo)

        nutrients = await claude_service.generate_structured(request)

        assert isinstance(nutrients, NutrientInfo)
        assert nutrients.sodium == 6

    @pytest.mark.asyncio
    async def test_schema_mismatch(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            as_model_text(ANALYSIS_PAYLOAD)
        )
        request = build_care_plan_request(["gout"], Locale.EN)

        with pytest.raises(MalformedResponseError):
            await claude_service.generate_structured(request)


# =============================================================================
# Food risk analysis
# =============================================================================


class TestAnalyzeFoodImage:
    """Tests for analyze_food_image and its fallback."""

    @pytest.mark.asyncio
    async def test_success(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            as_model_text(ANALYSIS_PAYLOAD)
        )

        result = await claude_service.analyze_food_image(
            make_image_part(), ["gout", "hypertension"], Locale.EN
        )

        assert result.food_name == "Beef Noodle Soup"
        assert result.risk_level is RiskLevel.MODERATE

        content = _sent_kwargs(mock_anthropic_client)["messages"][0]["content"]
        assert content[0]["type"] == "image"
        assert "Gout (痛风), Hypertension (高血压)" in content[-1]["text"]

    @pytest.mark.asyncio
    async def test_lowercase_risk_level_becomes_unknown(
        self, claude_service, mock_anthropic_client
    ):
        payload = dict(ANALYSIS_PAYLOAD, risk_level="risky")
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            as_model_text(payload)
        )

        result = await claude_service.analyze_food_image(make_image_part(), [], Locale.EN)

        assert result.risk_level is RiskLevel.UNKNOWN
        assert result.food_name == "Beef Noodle Soup"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "side_effect",
        [
            anthropic.APIConnectionError(request=MagicMock()),
            _status_error(anthropic.RateLimitError, 429, "Rate limited"),
            _status_error(anthropic.APIStatusError, 500, "Server error"),
            _status_error(anthropic.APIStatusError, 400, "Bad request"),
        ],
    )
    async def test_transport_failure_returns_fallback(
        self, claude_service, mock_anthropic_client, side_effect
    ):
        mock_anthropic_client.messages.create.side_effect = side_effect

        result = await claude_service.analyze_food_image(make_image_part(), ["gout"], Locale.EN)

        assert result.risk_level is RiskLevel.UNKNOWN
        assert result.food_name == "Analysis Failed"

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_localized_fallback(
        self, claude_service, mock_anthropic_client
    ):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            "this is not json"
        )

        result = await claude_service.analyze_food_image(make_image_part(), ["gout"], Locale.ZH)

        assert result.risk_level is RiskLevel.UNKNOWN
        assert result.food_name == "分析失败"
        assert result.triggered_conditions == []

    @pytest.mark.asyncio
    async def test_empty_payload_returns_fallback(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response("")

        result = await claude_service.analyze_food_image(make_image_part(), [], Locale.EN)

        assert result.risk_level is RiskLevel.UNKNOWN

    @pytest.mark.asyncio
    async def test_missing_credential_is_not_absorbed(
        self, keyless_service, mock_anthropic_client
    ):
        with pytest.raises(MissingCredentialError):
            await keyless_service.analyze_food_image(make_image_part(), ["gout"], Locale.EN)

        mock_anthropic_client.messages.create.assert_not_called()


# =============================================================================
# Care plan
# =============================================================================


class TestGenerateDietPlan:
    """Tests for generate_diet_plan (no fallback)."""

    @pytest.mark.asyncio
    async def test_success(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            as_model_text(DIET_PLAN_PAYLOAD)
        )

        plan = await claude_service.generate_diet_plan(["hypertension"], Locale.EN)

        assert plan.summary == DIET_PLAN_PAYLOAD["summary"]
        assert plan.generated_at is not None
        content = _sent_kwargs(mock_anthropic_client)["messages"][0]["content"]
        assert [block["type"] for block in content] == ["text"]

    @pytest.mark.asyncio
    async def test_malformed_propagates(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            json.dumps({"summary": "only this"})[1:]
        )

        with pytest.raises(MalformedResponseError):
            await claude_service.generate_diet_plan(["gout"], Locale.EN)

    @pytest.mark.asyncio
    async def test_service_error_propagates(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.side_effect = anthropic.APIConnectionError(
            request=MagicMock()
        )

        with pytest.raises(ServiceUnavailableError):
            await claude_service.generate_diet_plan(["gout"], Locale.EN)

    @pytest.mark.asyncio
    async def test_missing_credential(self, keyless_service):
        with pytest.raises(MissingCredentialError):
            await keyless_service.generate_diet_plan(["gout"], Locale.EN)


# =============================================================================
# Recipes
# =============================================================================


class TestGenerateRecipes:
    """Tests for generate_recipes (no fallback)."""

    @pytest.mark.asyncio
    async def test_success(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response(
            as_model_text(CHEF_PAYLOAD)
        )

        chef = await claude_service.generate_recipes(
            [make_image_part(), make_image_part("JPEG")], ["diabetes_t2"], Locale.EN
        )

        assert chef.breakfast.name == "Tomato Egg Scramble"
        content = _sent_kwargs(mock_anthropic_client)["messages"][0]["content"]
        assert [block["type"] for block in content] == ["image", "image", "text"]

    @pytest.mark.asyncio
    async def test_no_images(self, claude_service, mock_anthropic_client):
        with pytest.raises(ValueError):
            await claude_service.generate_recipes([], ["gout"], Locale.EN)

        mock_anthropic_client.messages.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_empty_response_propagates(self, claude_service, mock_anthropic_client):
        mock_anthropic_client.messages.create.return_value = create_mock_response("")

        with pytest.raises(EmptyResponseError):
            await claude_service.generate_recipes([make_image_part()], [], Locale.EN)
