from __future__ import annotations

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from models import ChecklistItem, RequiredItem
from services.checklist_generator import get_project_or_raise
from services.errors import NotFoundError
from services.scope import designation_filter, scope_for
from services.typed_values import answer_status, typed_columns

logger = structlog.get_logger()


async def get_required_item_or_raise(session: AsyncSession, item_id: str) -> RequiredItem:
    result = await session.execute(select(RequiredItem).where(RequiredItem.id == item_id))
    item = result.scalar_one_or_none()
    if item is None:
        raise NotFoundError("Required item", item_id)
    return item


async def _find_row(session: AsyncSession, project_id: str, item_id: str, designation: str | None):
    result = await session.execute(
        select(ChecklistItem).where(
            ChecklistItem.project_id == project_id,
            ChecklistItem.item_id == item_id,
            designation_filter(ChecklistItem.participant_designation, designation),
        )
    )
    return result.scalar_one_or_none()


async def save_checklist_answer(
    session: AsyncSession,
    project_id: str,
    item_id: str,
    value: Any,
    participant_designation: str | None = None,
) -> ChecklistItem:
    """
    Upsert the typed answer of a checklist item, keyed by (project, item, designation).
    Project-scoped items ignore the designation. Approved answers keep their status;
    a blank value clears the answer and puts the row back to pending.
    """
    await get_project_or_raise(session, project_id)
    item = await get_required_item_or_raise(session, item_id)
    designation = scope_for(item.scope, participant_designation).designation
    columns = typed_columns(value, item.item_type)

    row = await _find_row(session, project_id, item_id, designation)
    if row is None:
        row = ChecklistItem(project_id=project_id, item_id=item_id, participant_designation=designation)
        try:
            async with session.begin_nested():
                _apply(row, columns)
                session.add(row)
        except IntegrityError:
            # Created concurrently; fall through to update
            row = await _find_row(session, project_id, item_id, designation)
            if row is None:
                raise
            _apply(row, columns)
    else:
        _apply(row, columns)

    await session.flush()
    logger.info(
        "checklist_answer_saved",
        project_id=project_id,
        item_id=item_id,
        designation=designation,
        item_type=item.item_type,
    )
    return row


def _apply(row: ChecklistItem, columns: dict[str, Any]) -> None:
    for name, value in columns.items():
        setattr(row, name, value)
    row.status = answer_status(columns, row.status)
