"""
Per-category completion of a project's checklist.

An item counts as complete when an answered (submitted/approved) checklist row or an
uploaded document exists for it; participant-scoped items only look at rows of the
requested designation. The grouped query is the fast path; the per-item walk is the
reference it falls back to.
"""
from __future__ import annotations

from typing import Iterable, Sequence

import structlog
from sqlalchemy import case, func, or_, select, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import ChecklistItem, ProjectDocument, RequiredItem
from models.enums import ANSWERED_STATUSES, ItemScope
from schemas.checklist import CategoryCompletionInfo, OverallCompletion
from services.checklist_generator import get_project_or_raise

logger = structlog.get_logger()

# category_id -> (total_items, completed_items)
CompletionCounts = dict[str, tuple[int, int]]


def completion_percentage(completed: int, total: int) -> int:
    """Half-up rounded percentage; a category with nothing to answer is complete."""
    if total == 0:
        return 100
    return int(completed * 100 / total + 0.5)


def _participant_clause(item_scope, designation_column, participant_designation: str | None):
    if participant_designation is None:
        return true()
    return or_(item_scope != ItemScope.PARTICIPANT.value, designation_column == participant_designation)


async def batched_completion_counts(
    session: AsyncSession,
    project_id: str,
    category_ids: Sequence[str],
    participant_designation: str | None = None,
) -> CompletionCounts:
    """One grouped statement for every requested category."""
    answered = (
        select(ChecklistItem.id)
        .where(
            ChecklistItem.project_id == project_id,
            ChecklistItem.item_id == RequiredItem.id,
            ChecklistItem.status.in_(ANSWERED_STATUSES),
            _participant_clause(RequiredItem.scope, ChecklistItem.participant_designation, participant_designation),
        )
        .correlate(RequiredItem)
        .exists()
    )
    uploaded = (
        select(ProjectDocument.id)
        .where(
            ProjectDocument.project_id == project_id,
            ProjectDocument.item_id == RequiredItem.id,
            _participant_clause(RequiredItem.scope, ProjectDocument.participant_designation, participant_designation),
        )
        .correlate(RequiredItem)
        .exists()
    )
    stmt = (
        select(
            RequiredItem.category_id,
            func.count(RequiredItem.id).label("total_items"),
            func.sum(case((or_(answered, uploaded), 1), else_=0)).label("completed_items"),
        )
        .where(RequiredItem.category_id.in_(list(category_ids)))
        .group_by(RequiredItem.category_id)
    )
    result = await session.execute(stmt)
    return {row.category_id: (int(row.total_items), int(row.completed_items or 0)) for row in result.all()}


async def _item_is_complete(
    session: AsyncSession,
    project_id: str,
    item: RequiredItem,
    participant_designation: str | None,
) -> bool:
    narrow = item.scope == ItemScope.PARTICIPANT.value and participant_designation is not None

    checklist_stmt = select(ChecklistItem.id).where(
        ChecklistItem.project_id == project_id,
        ChecklistItem.item_id == item.id,
        ChecklistItem.status.in_(ANSWERED_STATUSES),
    )
    if narrow:
        checklist_stmt = checklist_stmt.where(ChecklistItem.participant_designation == participant_designation)
    if (await session.execute(checklist_stmt.limit(1))).first() is not None:
        return True

    document_stmt = select(ProjectDocument.id).where(
        ProjectDocument.project_id == project_id,
        ProjectDocument.item_id == item.id,
    )
    if narrow:
        document_stmt = document_stmt.where(ProjectDocument.participant_designation == participant_designation)
    return (await session.execute(document_stmt.limit(1))).first() is not None


async def per_item_completion_counts(
    session: AsyncSession,
    project_id: str,
    category_ids: Sequence[str],
    participant_designation: str | None = None,
) -> CompletionCounts:
    counts: CompletionCounts = {}
    for category_id in category_ids:
        result = await session.execute(select(RequiredItem).where(RequiredItem.category_id == category_id))
        items = result.scalars().all()
        completed = 0
        for item in items:
            item_id = item.id
            try:
                async with session.begin_nested():
                    complete = await _item_is_complete(session, project_id, item, participant_designation)
                if complete:
                    completed += 1
            except SQLAlchemyError as e:
                logger.warning("item_completion_check_failed", project_id=project_id, item_id=item_id, error=str(e))
        if items:
            counts[category_id] = (len(items), completed)
    return counts


async def category_completion(
    session: AsyncSession,
    project_id: str,
    categories: Iterable[tuple[str, str]],
    participant_designation: str | None = None,
) -> list[CategoryCompletionInfo]:
    """Completion info for each (category_id, category_name), in the order given."""
    await get_project_or_raise(session, project_id)
    categories = list(categories)
    category_ids = [category_id for category_id, _ in categories]

    counts = None
    if settings.completion_fast_path:
        try:
            async with session.begin_nested():
                counts = await batched_completion_counts(session, project_id, category_ids, participant_designation)
        except SQLAlchemyError as e:
            logger.warning("completion_fast_path_failed", project_id=project_id, error=str(e))
    if counts is None:
        counts = await per_item_completion_counts(session, project_id, category_ids, participant_designation)

    infos = []
    for category_id, name in categories:
        total, completed = counts.get(category_id, (0, 0))
        percentage = completion_percentage(completed, total)
        infos.append(
            CategoryCompletionInfo(
                category_id=category_id,
                category_name=name,
                completed_items=completed,
                total_items=total,
                completion_percentage=percentage,
                is_complete=percentage == 100,
            )
        )
    return infos


def overall_completion(infos: Iterable[CategoryCompletionInfo]) -> OverallCompletion:
    infos = list(infos)
    total = sum(i.total_items for i in infos)
    completed = sum(i.completed_items for i in infos)
    percentage = completion_percentage(completed, total) if total else 0
    return OverallCompletion(completed_items=completed, total_items=total, completion_percentage=percentage)
