"""API endpoints for the ingredient guide."""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from nutriguard.config import settings
from nutriguard.services.ingredient_service import (
    Ingredient,
    IngredientCategory,
    PersonalFilter,
    get_ingredient_catalogue,
    match_conditions,
)
from nutriguard.services.rule_store import Locale, get_rule_store, localized_name

router = APIRouter(prefix="/ingredients", tags=["ingredients"])


class MatchedCondition(BaseModel):
    id: str
    name: str


class IngredientEntry(BaseModel):
    ingredient: Ingredient
    beneficial_matches: list[MatchedCondition]
    harmful_matches: list[MatchedCondition]


def _named(condition_ids: list[str], locale: Locale) -> list[MatchedCondition]:
    """Attach a single-language display name to each condition id."""
    store = get_rule_store()
    named = []
    for condition_id in condition_ids:
        ref = store.resolve(condition_id)
        # Free text is shown exactly as entered
        name = localized_name(ref.name, locale) if ref.kind == "catalogued" else ref.name
        named.append(MatchedCondition(id=condition_id, name=name))
    return named


def _entry(ingredient: Ingredient, conditions: list[str], locale: Locale) -> IngredientEntry:
    matches = match_conditions(ingredient, conditions)
    return IngredientEntry(
        ingredient=ingredient,
        beneficial_matches=_named(matches.beneficial, locale),
        harmful_matches=_named(matches.harmful, locale),
    )


@router.get("", response_model=list[IngredientEntry])
async def list_ingredients(
    conditions: list[str] = Query([]),
    search: str = "",
    category: Optional[IngredientCategory] = None,
    personal_filter: PersonalFilter = PersonalFilter.ALL,
    locale: Locale = Locale(settings.default_locale),
):
    """
    Ingredient catalogue filtered by search term, category and the user's conditions.

    Each entry lists which of the user's conditions it helps or harms.
    """
    ingredients = get_ingredient_catalogue().filter(
        condition_ids=conditions,
        search=search,
        category=category,
        personal_filter=personal_filter,
    )
    return [_entry(ing, conditions, locale) for ing in ingredients]


@router.get("/{ingredient_id}", response_model=IngredientEntry)
async def get_ingredient(
    ingredient_id: str,
    conditions: list[str] = Query([]),
    locale: Locale = Locale(settings.default_locale),
):
    ingredient = get_ingredient_catalogue().get(ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found")
    return _entry(ingredient, conditions, locale)
