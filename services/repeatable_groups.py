"""
User-created, ordered groups of answers (secondary incomes, dependents, debts).

Rows live in one of three typed tables sharing the same layout, keyed by
(project, item, group_index, participant designation). A group is the set of rows
sharing a group_index within a (project, table, designation) scope.
"""
from __future__ import annotations

from typing import Any, Iterable

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from models import DebtItem, DependentItem, RequiredItem, SecondaryIncomeItem
from models.checklist import VALUE_COLUMNS
from models.enums import ANSWERED_STATUSES, ChecklistStatus, ItemType, RepeatableGroupTable
from schemas.checklist import GroupSummary
from services.errors import GroupConflictError, NotFoundError, UnsupportedTargetTableError
from services.scope import designation_filter
from services.typed_values import answer_status, has_answer, typed_columns, typed_value

logger = structlog.get_logger()

GROUP_TABLES = {
    RepeatableGroupTable.SECONDARY_INCOME.value: SecondaryIncomeItem,
    RepeatableGroupTable.DEPENDENTS.value: DependentItem,
    RepeatableGroupTable.DEBTS.value: DebtItem,
}


def group_model(target_table: str):
    try:
        return GROUP_TABLES[target_table]
    except KeyError:
        raise UnsupportedTargetTableError(target_table) from None


def summarize_groups(rows: Iterable[Any]) -> list[GroupSummary]:
    """Fold flat group rows into per-index summaries, ordered by group_index."""
    groups: dict[int, GroupSummary] = {}
    for row in sorted(rows, key=lambda r: r.group_index):
        summary = groups.get(row.group_index)
        if summary is None:
            summary = groups[row.group_index] = GroupSummary(group_index=row.group_index)
        summary.total_questions += 1
        answered = has_answer(row)
        if answered:
            summary.has_answers = True
            if row.status in ANSWERED_STATUSES:
                summary.completed_questions += 1
    return list(groups.values())


class RepeatableGroupManager:
    """Group operations for one (project, target table, participant designation) scope."""

    def __init__(
        self,
        session: AsyncSession,
        project_id: str,
        target_table: str,
        participant_designation: str | None = None,
    ):
        self.session = session
        self.project_id = project_id
        self.target_table = target_table
        self.participant_designation = participant_designation
        self.model = group_model(target_table)

    def _in_scope(self):
        model = self.model
        return (
            model.project_id == self.project_id,
            designation_filter(model.participant_designation, self.participant_designation),
        )

    async def next_group_index(self) -> int:
        result = await self.session.execute(select(func.max(self.model.group_index)).where(*self._in_scope()))
        current = result.scalar_one_or_none()
        return (current or 0) + 1

    async def _group_questions(self, subcategory: str) -> list[RequiredItem]:
        result = await self.session.execute(
            select(RequiredItem)
            .where(
                RequiredItem.subcategory == subcategory,
                RequiredItem.item_type != ItemType.REPEATABLE_GROUP.value,
            )
            .order_by(RequiredItem.priority.asc().nulls_last(), RequiredItem.id.asc())
        )
        return list(result.scalars().all())

    async def create_group(self, subcategory: str) -> int:
        """
        Create one pending row per question of the subcategory at the next index.
        All rows go in under one savepoint; an index collision with a concurrent
        creator rolls it back and retries with a fresh index.
        """
        questions = await self._group_questions(subcategory)
        if not questions:
            raise NotFoundError("Subcategory questions", subcategory)

        attempts = max(1, settings.group_create_max_attempts)
        for attempt in range(1, attempts + 1):
            group_index = await self.next_group_index()
            try:
                async with self.session.begin_nested():
                    for question in questions:
                        self.session.add(
                            self.model(
                                project_id=self.project_id,
                                item_id=question.id,
                                group_index=group_index,
                                participant_designation=self.participant_designation,
                                status=ChecklistStatus.PENDING.value,
                            )
                        )
            except IntegrityError as e:
                logger.warning(
                    "group_index_conflict",
                    project_id=self.project_id,
                    table=self.target_table,
                    group_index=group_index,
                    attempt=attempt,
                    error=str(e.orig),
                )
                continue
            logger.info(
                "group_created",
                project_id=self.project_id,
                table=self.target_table,
                designation=self.participant_designation,
                group_index=group_index,
                questions=len(questions),
            )
            return group_index

        raise GroupConflictError(
            f"Could not create group in {self.target_table} after {attempts} attempts"
        )

    async def _rows(self, group_index: int | None = None) -> list[Any]:
        stmt = select(self.model).where(*self._in_scope())
        if group_index is not None:
            stmt = stmt.where(self.model.group_index == group_index)
        stmt = stmt.order_by(self.model.group_index.asc(), self.model.id.asc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def load_all_groups(self) -> list[GroupSummary]:
        return summarize_groups(await self._rows())

    async def load_group_answers(self, group_index: int) -> dict[str, Any]:
        rows = await self._rows(group_index)
        if not rows:
            raise NotFoundError("Group", str(group_index))
        return {row.item_id: typed_value(row) for row in rows}

    async def save_answer(self, item_id: str, group_index: int, value: Any, item_type: str) -> None:
        values = typed_columns(value, item_type)
        values["status"] = answer_status(values)
        result = await self.session.execute(
            update(self.model)
            .where(
                *self._in_scope(),
                self.model.item_id == item_id,
                self.model.group_index == group_index,
            )
            .values(**values)
        )
        if not result.rowcount:
            raise NotFoundError("Group answer", f"{item_id}@{group_index}")
        logger.info(
            "group_answer_saved",
            project_id=self.project_id,
            table=self.target_table,
            group_index=group_index,
            item_id=item_id,
        )

    async def delete_group(self, group_index: int) -> int:
        result = await self.session.execute(
            delete(self.model).where(*self._in_scope(), self.model.group_index == group_index)
        )
        deleted = result.rowcount or 0
        logger.info(
            "group_deleted",
            project_id=self.project_id,
            table=self.target_table,
            group_index=group_index,
            rows=deleted,
        )
        return deleted

    async def group_has_answers(self, group_index: int) -> bool:
        answered = or_(*(getattr(self.model, column).is_not(None) for column in VALUE_COLUMNS))
        result = await self.session.execute(
            select(self.model.id)
            .where(*self._in_scope(), self.model.group_index == group_index, answered)
            .limit(1)
        )
        return result.first() is not None

    async def cleanup_empty_groups(self) -> list[int]:
        """Delete groups without any answer; returns the removed indices."""
        removed = []
        for summary in await self.load_all_groups():
            if not await self.group_has_answers(summary.group_index):
                await self.delete_group(summary.group_index)
                removed.append(summary.group_index)
        if removed:
            logger.info("empty_groups_removed", project_id=self.project_id, table=self.target_table, removed=removed)
        return removed
