"""
Brokerage rules applied between base item selection and checklist instantiation.

A rule fires when every key of its condition_logic matches the project
(project_type, applicant_count, has_guarantor); an empty condition always fires.
Firing rules remove matching items from the selection, or add matching catalog
items back. A broken rule is logged and skipped; it never stops generation.
"""
from __future__ import annotations

from typing import Any, Iterable

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import FormGenerationRule, Project, RequiredItem
from models.enums import GenerationRuleAction

logger = structlog.get_logger()

CONDITION_KEYS = ("project_type", "applicant_count", "has_guarantor")


def condition_met(condition_logic: Any, project: Project) -> bool:
    if condition_logic is None:
        return True
    if not isinstance(condition_logic, dict):
        raise TypeError(f"condition_logic must be an object, got {type(condition_logic).__name__}")
    for key in CONDITION_KEYS:
        if key in condition_logic and condition_logic[key] != getattr(project, key):
            return False
    return True


def item_matches(criteria: dict[str, Any], item: RequiredItem) -> bool:
    categories = criteria.get("item_categories") or []
    item_types = criteria.get("item_types") or []
    return item.category_id in categories or item.item_type in item_types


def apply_rule(
    rule: FormGenerationRule,
    items: list[RequiredItem],
    candidates: Iterable[RequiredItem],
    project: Project,
) -> list[RequiredItem]:
    """The selection after one rule; unchanged when the rule does not fire."""
    if not condition_met(rule.condition_logic, project):
        return items
    criteria = rule.target_criteria
    if not isinstance(criteria, dict):
        raise TypeError("target_criteria must be an object")

    action = criteria.get("action")
    if action == GenerationRuleAction.REMOVE_ITEMS.value:
        return [item for item in items if not item_matches(criteria, item)]
    if action == GenerationRuleAction.ADD_ITEMS.value:
        present = {item.id for item in items}
        added = [item for item in candidates if item.id not in present and item_matches(criteria, item)]
        return items + added
    raise ValueError(f"Unknown rule action: {action!r}")


async def load_active_rules(session: AsyncSession) -> list[FormGenerationRule]:
    result = await session.execute(
        select(FormGenerationRule)
        .where(FormGenerationRule.is_active.is_(True), FormGenerationRule.rule_type == "conditional")
        .order_by(FormGenerationRule.priority.asc().nulls_last(), FormGenerationRule.id.asc())
    )
    return list(result.scalars().all())


async def apply_generation_rules(
    session: AsyncSession,
    base_items: list[RequiredItem],
    project: Project,
) -> list[RequiredItem]:
    """
    Run every active conditional rule in priority order over the base selection.
    Items a rule adds come from `base_items`, so they already apply to the project type.
    """
    try:
        async with session.begin_nested():
            rules = await load_active_rules(session)
    except SQLAlchemyError as e:
        logger.warning("generation_rules_unavailable", project_id=project.id, error=str(e))
        return base_items

    items = list(base_items)
    for rule in rules:
        rule_name = rule.rule_name
        before = len(items)
        try:
            items = apply_rule(rule, items, base_items, project)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("generation_rule_failed", project_id=project.id, rule=rule_name, error=str(e))
            continue
        if len(items) != before:
            logger.info(
                "generation_rule_applied",
                project_id=project.id,
                rule=rule_name,
                items_before=before,
                items_after=len(items),
            )
    return items
