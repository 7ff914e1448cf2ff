"""
Save-time evaluation of conditional questions.

Each catalog item may carry validation rules mapping a subcategory to a list of
conditions on its answer. When a batch of answers is saved for a category, the
subcategories whose conditions all hold are unlocked, and answers already present
in the batch for the unlocked questions are handed back so the form can keep them.
Nothing is written here; materializing rows for unlocked questions is the caller's job.
"""
from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import ItemCategory, RequiredItem
from schemas.checklist import ConditionalLogicResult
from schemas.conditions import ValidationRules, parse_validation_rules
from services.errors import NotFoundError

logger = structlog.get_logger()

_ABSENT = object()


def _answer_for(
    item_id: str,
    form_answers: dict[str, Any],
    item_id_to_form_field: dict[str, str],
) -> Any:
    field = item_id_to_form_field.get(item_id)
    if field is None or field not in form_answers:
        return _ABSENT
    return form_answers[field]


def unlocked_by_item(
    item_id: str,
    rules: ValidationRules,
    form_answers: dict[str, Any],
    item_id_to_form_field: dict[str, str],
) -> list[str]:
    """Subcategories whose conditions all hold for one governing item."""
    governing = _answer_for(item_id, form_answers, item_id_to_form_field)
    if governing is _ABSENT:
        return []

    unlocked = []
    for subcategory, conditions in rules.items():
        if not conditions:
            continue
        satisfied = True
        for condition in conditions:
            if condition.item_id and condition.item_id != item_id:
                answer = _answer_for(condition.item_id, form_answers, item_id_to_form_field)
            else:
                answer = governing
            if answer is _ABSENT or not condition.holds(answer):
                satisfied = False
                break
        if satisfied:
            unlocked.append(subcategory)
    return unlocked


async def _ensure_category(session: AsyncSession, category_id: str) -> None:
    result = await session.execute(select(ItemCategory.id).where(ItemCategory.id == category_id))
    if result.first() is None:
        raise NotFoundError("Category", category_id)


async def evaluate_conditional_logic(
    session: AsyncSession,
    category_id: str,
    form_answers: dict[str, Any],
    item_id_to_form_field: dict[str, str],
) -> ConditionalLogicResult:
    await _ensure_category(session, category_id)

    result = await session.execute(
        select(RequiredItem)
        .where(RequiredItem.category_id == category_id, RequiredItem.validation_rules.is_not(None))
        .order_by(RequiredItem.priority.asc().nulls_last(), RequiredItem.id.asc())
    )
    governing_items = result.scalars().all()

    unlocked: list[str] = []
    for item in governing_items:
        try:
            rules = parse_validation_rules(item.validation_rules)
        except (ValidationError, ValueError) as e:
            logger.warning("conditional_rule_invalid", item_id=item.id, category_id=category_id, error=str(e))
            continue
        try:
            for subcategory in unlocked_by_item(item.id, rules, form_answers, item_id_to_form_field):
                if subcategory not in unlocked:
                    unlocked.append(subcategory)
        except Exception as e:
            logger.error("conditional_rule_failed", item_id=item.id, category_id=category_id, error=str(e))

    preserved: dict[str, Any] = {}
    if unlocked:
        items_result = await session.execute(select(RequiredItem).where(RequiredItem.subcategory.in_(unlocked)))
        for item in items_result.scalars().all():
            answer = _answer_for(item.id, form_answers, item_id_to_form_field)
            if answer is not _ABSENT:
                preserved[item_id_to_form_field[item.id]] = answer

    logger.info(
        "conditional_logic_evaluated",
        category_id=category_id,
        governing_items=len(governing_items),
        unlocked=unlocked,
        preserved=len(preserved),
    )
    return ConditionalLogicResult(unlocked_subcategories=unlocked, preserved_answers=preserved)
