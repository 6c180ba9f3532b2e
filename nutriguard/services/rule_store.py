"""
Clinical rule store: condition catalogue, diet rules and disease information.

The reference data ships as JSON inside ``nutriguard.data`` and is loaded once
per process. Every model handed out is frozen and the lookup tables are
read-only mappings, so the store has no way to be written to after load.
"""

import json
from enum import Enum
from functools import lru_cache
from importlib import resources
from types import MappingProxyType
from typing import Annotated, Any, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Locale(str, Enum):
    """Supported output languages."""

    EN = "en"
    ZH = "zh"


class FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True)


class LocalizedText(FrozenModel):
    en: str
    zh: str

    def get(self, locale: Locale) -> str:
        return self.zh if Locale(locale) is Locale.ZH else self.en


# --- Catalogue tree ---


class HealthCondition(FrozenModel):
    id: str
    name: str  # "English (中文)"
    description: Optional[str] = None


class HealthGroup(FrozenModel):
    id: str
    name: str
    conditions: tuple[HealthCondition, ...]


class HealthCategory(FrozenModel):
    id: str
    name: str
    groups: tuple[HealthGroup, ...]


class DietRule(FrozenModel):
    id: str
    name: str
    avoid: tuple[str, ...]
    limit: tuple[str, ...]
    recommend: tuple[str, ...]
    general_advice: str


class DiseaseInfo(FrozenModel):
    id: str
    overview: LocalizedText
    severity: LocalizedText
    dietary_habits: LocalizedText
    advice: LocalizedText


# --- Condition references ---
#
# Profiles mix catalogue ids with whatever the user typed in. Both arrive as
# plain strings; resolve() tags them so callers cannot mistake a free-text
# entry for something that has a rule behind it.


class CataloguedCondition(FrozenModel):
    kind: Literal["catalogued"] = "catalogued"
    id: str
    name: str


class FreeTextCondition(FrozenModel):
    kind: Literal["free_text"] = "free_text"
    text: str

    @property
    def id(self) -> str:
        return self.text

    @property
    def name(self) -> str:
        return self.text


ConditionRef = Annotated[
    Union[CataloguedCondition, FreeTextCondition],
    Field(discriminator="kind"),
]


def localized_name(name: str, locale: Locale) -> str:
    """
    Pick one language out of a bilingual "English (中文)" display name.

    Names without a parenthesised part are returned unchanged.
    """
    head, sep, tail = name.partition("(")
    if not sep:
        return name
    if Locale(locale) is Locale.ZH:
        return tail.rsplit(")", 1)[0].strip() or name
    return head.strip() or name


def load_json(resource_name: str, package: str = "nutriguard.data") -> Any:
    resource = resources.files(package).joinpath(resource_name)
    with resource.open("r", encoding="utf-8") as handle:
        return json.load(handle)


class ClinicalRuleStore:
    """Read-only lookups over the condition catalogue and its rules."""

    def __init__(
        self,
        categories: Iterable[HealthCategory],
        rules: Iterable[DietRule],
        disease_info: Iterable[DiseaseInfo],
    ):
        self._categories = tuple(categories)
        self._conditions = MappingProxyType(
            {
                condition.id: condition
                for category in self._categories
                for group in category.groups
                for condition in group.conditions
            }
        )
        self._rules = MappingProxyType({rule.id: rule for rule in rules})
        self._disease_info = MappingProxyType({info.id: info for info in disease_info})

    @classmethod
    def from_package_data(cls, package: str = "nutriguard.data") -> "ClinicalRuleStore":
        return cls(
            categories=[
                HealthCategory.model_validate(c)
                for c in load_json("catalogue.json", package)
            ],
            rules=[DietRule.model_validate(r) for r in load_json("diet_rules.json", package)],
            disease_info=[
                DiseaseInfo.model_validate(d)
                for d in load_json("disease_info.json", package)
            ],
        )

    def list_catalogue(self) -> tuple[HealthCategory, ...]:
        """Categories in canonical display order."""
        return self._categories

    def all_conditions(self) -> tuple[HealthCondition, ...]:
        """Flattened catalogue, in display order."""
        return tuple(self._conditions.values())

    def get_condition(self, condition_id: str) -> Optional[HealthCondition]:
        return self._conditions.get(condition_id)

    def lookup_rule(self, condition_id: str) -> Optional[DietRule]:
        return self._rules.get(condition_id)

    def lookup_disease_info(self, condition_id: str) -> Optional[DiseaseInfo]:
        return self._disease_info.get(condition_id)

    def resolve(self, condition_id: str) -> ConditionRef:
        condition = self._conditions.get(condition_id)
        if condition is None:
            return FreeTextCondition(text=condition_id)
        return CataloguedCondition(id=condition.id, name=condition.name)

    def resolve_all(self, condition_ids: Iterable[str]) -> list[ConditionRef]:
        return [self.resolve(cid) for cid in condition_ids]


@lru_cache(maxsize=1)
def get_rule_store() -> ClinicalRuleStore:
    """Process-wide store, loaded on first use."""
    return ClinicalRuleStore.from_package_data()
