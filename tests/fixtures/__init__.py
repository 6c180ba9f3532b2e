"""Test fixtures for NutriGuard."""

from tests.fixtures.mocks import (
    ANALYSIS_PAYLOAD,
    CHEF_PAYLOAD,
    DIET_PLAN_PAYLOAD,
    MockClaudeService,
    as_model_text,
    make_image_bytes,
    make_image_part,
)

__all__ = [
    "ANALYSIS_PAYLOAD",
    "CHEF_PAYLOAD",
    "DIET_PLAN_PAYLOAD",
    "MockClaudeService",
    "as_model_text",
    "make_image_bytes",
    "make_image_part",
]
