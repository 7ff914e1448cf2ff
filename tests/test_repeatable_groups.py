"""
Repeatable groups: index allocation, answers, deletion and empty-group cleanup.
Run from the repository root: python -m pytest tests/test_repeatable_groups.py -v
"""
import unittest
from types import SimpleNamespace
from unittest import mock

from sqlalchemy import func, select

from checklist_fixtures import DatabaseTestCase
from models import DependentItem, SecondaryIncomeItem
from services.errors import GroupConflictError, InvalidAnswerError, NotFoundError, UnsupportedTargetTableError
from services.repeatable_groups import RepeatableGroupManager, summarize_groups

INCOME_TABLE = "project_secondary_income_items"


class TestSummarizeGroups(unittest.TestCase):
    def _row(self, group_index, status="pending", **values):
        base = dict(text_value=None, numeric_value=None, boolean_value=None, date_value=None, json_value=None)
        base.update(values)
        return SimpleNamespace(group_index=group_index, status=status, **base)

    def test_folds_rows_per_index_in_order(self):
        rows = [
            self._row(2),
            self._row(1, status="submitted", text_value="Rental"),
            self._row(1),
            self._row(2),
        ]
        groups = summarize_groups(rows)
        self.assertEqual([g.group_index for g in groups], [1, 2])
        self.assertEqual((groups[0].completed_questions, groups[0].total_questions, groups[0].has_answers), (1, 2, True))
        self.assertEqual((groups[1].completed_questions, groups[1].total_questions, groups[1].has_answers), (0, 2, False))

    def test_no_rows(self):
        self.assertEqual(summarize_groups([]), [])


class TestRepeatableGroupManager(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.add_category("income")
        await self.add_project(applicant_count="two_applicants")
        await self.add_item(
            "secondary-incomes",
            category_id="income",
            item_type="repeatable_group",
            scope="PARTICIPANT",
            subcategory="secondary_income",
            repeatable_group_target_table=INCOME_TABLE,
        )
        await self.add_item("source", category_id="income", scope="PARTICIPANT", subcategory="secondary_income", priority=1)
        await self.add_item(
            "amount",
            category_id="income",
            item_type="number",
            scope="PARTICIPANT",
            subcategory="secondary_income",
            priority=2,
        )
        self.manager = RepeatableGroupManager(self.session, "proj-1", INCOME_TABLE, "applicant_one")

    async def _row_count(self, model=SecondaryIncomeItem):
        return (await self.session.execute(select(func.count(model.id)))).scalar_one()

    async def test_unsupported_table(self):
        with self.assertRaises(UnsupportedTargetTableError):
            RepeatableGroupManager(self.session, "proj-1", "project_pets", "applicant_one")

    async def test_first_index_is_one(self):
        self.assertEqual(await self.manager.next_group_index(), 1)

    async def test_indices_are_monotonic_and_never_reused(self):
        created = [await self.manager.create_group("secondary_income") for _ in range(3)]
        self.assertEqual(created, [1, 2, 3])

        await self.manager.delete_group(2)
        self.assertEqual(await self.manager.create_group("secondary_income"), 4)
        self.assertEqual([g.group_index for g in await self.manager.load_all_groups()], [1, 3, 4])

    async def test_group_rows_skip_the_group_item_itself(self):
        await self.manager.create_group("secondary_income")
        self.assertEqual(await self._row_count(), 2)
        groups = await self.manager.load_all_groups()
        self.assertEqual(groups[0].total_questions, 2)
        self.assertFalse(groups[0].has_answers)

    async def test_scopes_are_independent(self):
        other = RepeatableGroupManager(self.session, "proj-1", INCOME_TABLE, "applicant_two")
        await self.manager.create_group("secondary_income")
        await self.manager.create_group("secondary_income")
        self.assertEqual(await other.create_group("secondary_income"), 1)
        self.assertEqual(len(await other.load_all_groups()), 1)

    async def test_unknown_subcategory(self):
        with self.assertRaises(NotFoundError):
            await self.manager.create_group("pets")
        self.assertEqual(await self._row_count(), 0)

    async def test_save_and_load_answers(self):
        index = await self.manager.create_group("secondary_income")
        await self.manager.save_answer("source", index, "Rental", "text")
        await self.manager.save_answer("amount", index, "1200", "number")

        self.assertEqual(await self.manager.load_group_answers(index), {"source": "Rental", "amount": 1200.0})
        groups = await self.manager.load_all_groups()
        self.assertEqual((groups[0].completed_questions, groups[0].total_questions), (2, 2))

    async def test_save_answer_to_missing_row(self):
        await self.manager.create_group("secondary_income")
        with self.assertRaises(NotFoundError):
            await self.manager.save_answer("source", 9, "Rental", "text")

    async def test_save_invalid_number(self):
        index = await self.manager.create_group("secondary_income")
        with self.assertRaises(InvalidAnswerError):
            await self.manager.save_answer("amount", index, "a lot", "number")

    async def test_load_missing_group(self):
        with self.assertRaises(NotFoundError):
            await self.manager.load_group_answers(1)

    async def test_cleanup_removes_only_unanswered_groups(self):
        kept = await self.manager.create_group("secondary_income")
        dropped = await self.manager.create_group("secondary_income")
        await self.manager.save_answer("source", kept, "Rental", "text")

        removed = await self.manager.cleanup_empty_groups()

        self.assertEqual(removed, [dropped])
        self.assertTrue(await self.manager.group_has_answers(kept))
        self.assertEqual([g.group_index for g in await self.manager.load_all_groups()], [kept])

    async def test_cleared_answers_leave_the_group_empty(self):
        index = await self.manager.create_group("secondary_income")
        await self.manager.save_answer("source", index, "Rental", "text")
        await self.manager.save_answer("source", index, None, "text")

        self.assertFalse(await self.manager.group_has_answers(index))
        self.assertEqual(await self.manager.load_group_answers(index), {"source": None, "amount": None})
        self.assertEqual(await self.manager.cleanup_empty_groups(), [index])
        self.assertEqual(await self._row_count(), 0)

    async def test_delete_group_reports_rows(self):
        index = await self.manager.create_group("secondary_income")
        self.assertEqual(await self.manager.delete_group(index), 2)
        self.assertEqual(await self.manager.delete_group(index), 0)

    async def test_project_level_groups(self):
        await self.add_item("dep-name", category_id="income", subcategory="dependents")
        manager = RepeatableGroupManager(self.session, "proj-1", "project_dependent_items")
        self.assertEqual(await manager.create_group("dependents"), 1)
        self.assertEqual(await manager.create_group("dependents"), 2)
        rows = (await self.session.execute(select(DependentItem))).scalars().all()
        self.assertEqual({row.participant_designation for row in rows}, {None})

    async def test_retries_with_a_fresh_index_after_a_conflict(self):
        await self.manager.create_group("secondary_income")
        stale = mock.AsyncMock(side_effect=[1, 2])
        with mock.patch.object(self.manager, "next_group_index", stale):
            self.assertEqual(await self.manager.create_group("secondary_income"), 2)
        self.assertEqual(await self._row_count(), 4)

    async def test_gives_up_after_repeated_index_conflicts(self):
        await self.manager.create_group("secondary_income")
        with mock.patch.object(self.manager, "next_group_index", mock.AsyncMock(return_value=1)):
            with self.assertRaises(GroupConflictError):
                await self.manager.create_group("secondary_income")
        # The failed attempts leave nothing behind
        self.assertEqual(await self._row_count(), 2)


if __name__ == "__main__":
    unittest.main()
