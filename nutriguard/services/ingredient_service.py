"""Ingredient guide: catalogue of common foods and condition matching."""

from enum import Enum
from functools import lru_cache
from typing import Iterable, NamedTuple, Optional

from pydantic import model_validator

from nutriguard.services.rule_store import FrozenModel, LocalizedText, load_json


class IngredientCategory(str, Enum):
    GRAIN = "grain"
    PROTEIN = "protein"
    VEGETABLE = "vegetable"
    FRUIT = "fruit"
    DAIRY = "dairy"
    OTHER = "other"


class PersonalFilter(str, Enum):
    ALL = "all"
    BENEFICIAL = "beneficial"
    AVOID = "avoid"


class Macros(FrozenModel):
    protein: float
    carbs: float
    fat: float


class Ingredient(FrozenModel):
    id: str
    name: LocalizedText
    category: IngredientCategory
    calories: float  # kcal per 100 g
    nutrients: Macros  # g per 100 g
    beneficial_for: tuple[str, ...] = ()
    harmful_for: tuple[str, ...] = ()
    description: LocalizedText

    @model_validator(mode="after")
    def _no_condition_on_both_sides(self):
        overlap = set(self.beneficial_for) & set(self.harmful_for)
        if overlap:
            raise ValueError(
                f"{self.id}: conditions listed as both beneficial and harmful: "
                f"{sorted(overlap)}"
            )
        return self


class ConditionMatches(NamedTuple):
    beneficial: list[str]
    harmful: list[str]


def match_conditions(ingredient: Ingredient, condition_ids: Iterable[str]) -> ConditionMatches:
    """
    Intersect the ingredient's beneficial/harmful lists with the user's conditions.

    Results follow the ingredient's own list order.
    """
    wanted = set(condition_ids)
    return ConditionMatches(
        beneficial=[c for c in ingredient.beneficial_for if c in wanted],
        harmful=[c for c in ingredient.harmful_for if c in wanted],
    )


class IngredientCatalogue:
    """Read-only ingredient list in its bundled order."""

    def __init__(self, ingredients: Iterable[Ingredient]):
        self._ingredients = tuple(ingredients)
        self._by_id = {ing.id: ing for ing in self._ingredients}

    @classmethod
    def from_package_data(cls, package: str = "nutriguard.data") -> "IngredientCatalogue":
        return cls(Ingredient.model_validate(i) for i in load_json("ingredients.json", package))

    def all(self) -> tuple[Ingredient, ...]:
        return self._ingredients

    def get(self, ingredient_id: str) -> Optional[Ingredient]:
        return self._by_id.get(ingredient_id)

    def filter(
        self,
        condition_ids: Iterable[str] = (),
        search: str = "",
        category: Optional[IngredientCategory] = None,
        personal_filter: PersonalFilter = PersonalFilter.ALL,
    ) -> list[Ingredient]:
        """
        Filter the catalogue the way the ingredient guide does.

        search: case-insensitive match on the English name, substring match on
            the Chinese name
        category: None means every category
        personal_filter: BENEFICIAL / AVOID keep only ingredients with at least
            one matching condition on that side
        """
        condition_ids = list(condition_ids)
        term = search.strip()
        results = []
        for ing in self._ingredients:
            if term and term.lower() not in ing.name.en.lower() and term not in ing.name.zh:
                continue
            if category is not None and ing.category != category:
                continue
            if personal_filter is not PersonalFilter.ALL:
                matches = match_conditions(ing, condition_ids)
                if personal_filter is PersonalFilter.BENEFICIAL and not matches.beneficial:
                    continue
                if personal_filter is PersonalFilter.AVOID and not matches.harmful:
                    continue
            results.append(ing)
        return results


@lru_cache(maxsize=1)
def get_ingredient_catalogue() -> IngredientCatalogue:
    return IngredientCatalogue.from_package_data()
