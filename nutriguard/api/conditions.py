"""API endpoints for the condition catalogue and clinical guidance."""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from nutriguard.services.guidelines import build_guidance_text, condition_display_names
from nutriguard.services.rule_store import (
    ConditionRef,
    DietRule,
    DiseaseInfo,
    HealthCategory,
    get_rule_store,
)

router = APIRouter(tags=["conditions"])


class ConditionDetail(BaseModel):
    condition: ConditionRef
    rule: Optional[DietRule] = None
    info: Optional[DiseaseInfo] = None


class GuidanceRequest(BaseModel):
    conditions: list[str] = []


class GuidanceResponse(BaseModel):
    display_names: list[str]
    guidance: str


@router.get("/conditions", response_model=list[HealthCategory])
async def list_conditions():
    """Full category -> group -> condition tree in display order."""
    return list(get_rule_store().list_catalogue())


@router.get("/conditions/{condition_id}", response_model=ConditionDetail)
async def get_condition(condition_id: str):
    """
    Diet rule and disease information for one condition.

    Either part may be missing; 404 only when the id is unknown everywhere.
    """
    store = get_rule_store()
    rule = store.lookup_rule(condition_id)
    info = store.lookup_disease_info(condition_id)
    if store.get_condition(condition_id) is None and rule is None and info is None:
        raise HTTPException(status_code=404, detail="Condition not found")

    return ConditionDetail(condition=store.resolve(condition_id), rule=rule, info=info)


@router.post("/guidance", response_model=GuidanceResponse)
async def guidance(body: GuidanceRequest):
    """Preview the grounding text sent along with every AI request."""
    return GuidanceResponse(
        display_names=condition_display_names(body.conditions),
        guidance=build_guidance_text(body.conditions),
    )
