"""
Materializes a project's checklist from the item catalog.

Only main questions (no subcategory) and initiator questions are created up front;
conditional questions are created when their subcategory unlocks. Every insert is
idempotent per (project, item, participant designation), so generation can be re-run.
Active generation rules run between base selection and instantiation.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable

import structlog
from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from models import ChecklistItem, DebtItem, DependentItem, Project, RequiredItem, SecondaryIncomeItem
from schemas.checklist import GenerationResult
from services.errors import NotFoundError
from services.generation_rules import apply_generation_rules
from services.scope import Scope, designation_filter, scope_for, scopes_for_item

logger = structlog.get_logger()

MSG_ALREADY_GENERATED = "Checklist already generated"


async def get_project_or_raise(session: AsyncSession, project_id: str) -> Project:
    result = await session.execute(select(Project).where(Project.id == project_id))
    project = result.scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project", project_id)
    return project


async def load_catalog(session: AsyncSession) -> list[RequiredItem]:
    """Full catalog, ordered by priority then creation time."""
    result = await session.execute(
        select(RequiredItem).order_by(
            RequiredItem.priority.asc().nulls_last(),
            RequiredItem.created_at.asc(),
            RequiredItem.id.asc(),
        )
    )
    return list(result.scalars().all())


def select_base_items(items: Iterable[RequiredItem], project_type: str | None) -> list[RequiredItem]:
    """Catalog items that apply to the project type."""
    return [item for item in items if item.applies_to(project_type)]


def select_generation_items(items: Iterable[RequiredItem]) -> list[RequiredItem]:
    """Items materialized at generation time: main or initiator questions, never conditional ones."""
    return [item for item in items if not item.is_conditional]


async def insert_checklist_row(
    session: AsyncSession,
    project_id: str,
    item_id: str,
    scope: Scope,
) -> ChecklistItem | None:
    """
    Insert one pending checklist row. Returns None when the row already exists,
    either found up front or reported by the unique constraint.
    """
    designation = scope.designation
    existing = await session.execute(
        select(ChecklistItem.id).where(
            ChecklistItem.project_id == project_id,
            ChecklistItem.item_id == item_id,
            designation_filter(ChecklistItem.participant_designation, designation),
        )
    )
    if existing.first() is not None:
        return None

    row = ChecklistItem(
        project_id=project_id,
        item_id=item_id,
        participant_designation=designation,
        status="pending",
    )
    try:
        async with session.begin_nested():
            session.add(row)
    except IntegrityError:
        logger.info("checklist_item_exists", project_id=project_id, item_id=item_id, designation=designation)
        return None
    return row


async def _materialize(
    session: AsyncSession,
    project_id: str,
    items: Iterable[RequiredItem],
    scopes_of,
) -> GenerationResult:
    result = GenerationResult()
    for item in items:
        try:
            for scope in scopes_of(item):
                row = await insert_checklist_row(session, project_id, item.id, scope)
                if row is None:
                    result.items_skipped += 1
                else:
                    result.items_created += 1
        except (SQLAlchemyError, ValueError) as e:
            logger.warning("checklist_item_failed", project_id=project_id, item_id=item.id, error=str(e))
            result.errors.append(f"Failed to create item {item.item_name}: {e}")
            result.items_skipped += 1
    return result


async def _reset_checklist(session: AsyncSession, project: Project) -> None:
    await session.execute(delete(ChecklistItem).where(ChecklistItem.project_id == project.id))
    project.checklist_generated_at = None
    await session.flush()
    logger.info("checklist_reset", project_id=project.id)


async def generate_checklist(
    session: AsyncSession,
    project_id: str,
    force_regenerate: bool = False,
) -> GenerationResult:
    """
    Generate checklist rows for a project.
    Already-generated projects are a no-op unless force_regenerate, which first
    deletes every checklist row of the project (answers included).
    Per-item failures are collected in `errors`; the generation timestamp is only
    stamped when there were none.
    """
    project = await get_project_or_raise(session, project_id)

    if force_regenerate:
        await _reset_checklist(session, project)
    elif project.checklist_generated_at is not None:
        logger.info("checklist_already_generated", project_id=project_id)
        return GenerationResult(errors=[MSG_ALREADY_GENERATED])

    catalog = await load_catalog(session)
    base_items = select_base_items(catalog, project.project_type)
    ruled_items = await apply_generation_rules(session, base_items, project)
    items = select_generation_items(ruled_items)

    result = await _materialize(
        session,
        project.id,
        items,
        lambda item: scopes_for_item(item.scope, project.applicant_count),
    )

    if not result.errors:
        project.checklist_generated_at = datetime.now(timezone.utc)
        await session.flush()

    logger.info(
        "checklist_generated",
        project_id=project_id,
        catalog_size=len(catalog),
        base=len(base_items),
        selected=len(items),
        created=result.items_created,
        skipped=result.items_skipped,
        errors=len(result.errors),
    )
    return result


async def materialize_subcategory_items(
    session: AsyncSession,
    project_id: str,
    subcategories: list[str],
    participant_designation: str | None = None,
) -> GenerationResult:
    """Create checklist rows for the questions of newly unlocked subcategories."""
    if not subcategories:
        return GenerationResult()
    project = await get_project_or_raise(session, project_id)

    stmt = (
        select(RequiredItem)
        .where(RequiredItem.subcategory.in_(subcategories))
        .order_by(RequiredItem.priority.asc().nulls_last(), RequiredItem.id.asc())
    )
    items = [i for i in (await session.execute(stmt)).scalars().all() if i.applies_to(project.project_type)]

    def scopes_of(item: RequiredItem) -> list[Scope]:
        if participant_designation is None:
            return scopes_for_item(item.scope, project.applicant_count)
        return [scope_for(item.scope, participant_designation)]

    result = await _materialize(session, project.id, items, scopes_of)
    logger.info(
        "subcategory_items_materialized",
        project_id=project_id,
        subcategories=subcategories,
        created=result.items_created,
        skipped=result.items_skipped,
    )
    return result


async def remove_participant_rows(session: AsyncSession, project_id: str, designation: str) -> int:
    """Delete every checklist and repeatable-group row of one participant."""
    await get_project_or_raise(session, project_id)
    removed = 0
    for model in (ChecklistItem, SecondaryIncomeItem, DependentItem, DebtItem):
        res = await session.execute(
            delete(model).where(model.project_id == project_id, model.participant_designation == designation)
        )
        removed += res.rowcount or 0
    logger.info("participant_rows_removed", project_id=project_id, designation=designation, removed=removed)
    return removed


async def list_checklist_items(
    session: AsyncSession,
    project_id: str,
    category_id: str | None = None,
    participant_designation: str | None = None,
) -> list[tuple[ChecklistItem, RequiredItem]]:
    """Checklist rows joined with their catalog item; a designation also keeps project-level rows."""
    stmt = (
        select(ChecklistItem, RequiredItem)
        .join(RequiredItem, RequiredItem.id == ChecklistItem.item_id)
        .where(ChecklistItem.project_id == project_id)
    )
    if category_id:
        stmt = stmt.where(RequiredItem.category_id == category_id)
    if participant_designation:
        stmt = stmt.where(
            or_(
                ChecklistItem.participant_designation == participant_designation,
                ChecklistItem.participant_designation.is_(None),
            )
        )
    stmt = stmt.order_by(RequiredItem.priority.asc().nulls_last(), ChecklistItem.id.asc())
    result = await session.execute(stmt)
    return [(row, item) for row, item in result.all()]
