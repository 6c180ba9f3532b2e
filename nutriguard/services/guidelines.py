"""
Guideline aggregation: condition ids -> clinical guidance text for prompts.

Blocks are emitted in input order, one per id that has a diet rule. Nothing is
deduplicated or re-sorted; ids without a rule (free text, unknown, or
catalogued conditions that simply have no rule) are skipped here but still
show up in the display-name list.
"""

from typing import Iterable, Optional

from nutriguard.services.rule_store import ClinicalRuleStore, DietRule, get_rule_store

GENERIC_GUIDANCE = (
    "No specific medical conditions provided. "
    "Follow general healthy eating guidelines."
)


def format_rule_block(rule: DietRule) -> str:
    return "\n".join(
        [
            f"Condition: {rule.name}",
            f"- STRICTLY AVOID: {', '.join(rule.avoid)}",
            f"- LIMIT: {', '.join(rule.limit)}",
            f"- BENEFICIAL: {', '.join(rule.recommend)}",
            f"- CLINICAL ADVICE: {rule.general_advice}",
        ]
    )


def build_guidance_text(
    condition_ids: Iterable[str], store: Optional[ClinicalRuleStore] = None
) -> str:
    """
    Consolidate the diet rules for ``condition_ids`` into one text block.

    Returns GENERIC_GUIDANCE when the list is empty or no id resolves to a rule,
    never an empty string.
    """
    store = store or get_rule_store()
    blocks = []
    for condition_id in condition_ids:
        rule = store.lookup_rule(condition_id)
        if rule is None:
            continue
        blocks.append(format_rule_block(rule))

    if not blocks:
        return GENERIC_GUIDANCE
    return "\n\n".join(blocks)


def condition_display_names(
    condition_ids: Iterable[str], store: Optional[ClinicalRuleStore] = None
) -> list[str]:
    """Catalogue name for each id, or the raw id when it is not catalogued."""
    store = store or get_rule_store()
    return [store.resolve(cid).name for cid in condition_ids]


def format_condition_names(
    condition_ids: Iterable[str], store: Optional[ClinicalRuleStore] = None
) -> str:
    return ", ".join(condition_display_names(condition_ids, store))
