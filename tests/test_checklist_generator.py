"""
Checklist generation: idempotence, participant fan-out, project-type filtering,
conditional exclusion and later materialization of unlocked subcategories.
Run from the repository root: python -m pytest tests/test_checklist_generator.py -v
"""
import unittest

from sqlalchemy import select

from checklist_fixtures import DatabaseTestCase
from models import ChecklistItem, DependentItem
from services.checklist_answers import save_checklist_answer
from services.checklist_generator import (
    MSG_ALREADY_GENERATED,
    generate_checklist,
    insert_checklist_row,
    list_checklist_items,
    materialize_subcategory_items,
    remove_participant_rows,
)
from services.errors import NotFoundError
from services.scope import ProjectScope


class TestGenerateChecklist(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.add_category()

    async def test_end_to_end_purchase_single_applicant(self):
        """Project item once, participant item for the solo applicant, conditional item absent."""
        await self.add_project(project_type="purchase", applicant_count="one_applicant")
        await self.add_item("1", scope="PROJECT")
        await self.add_item("2", scope="PARTICIPANT")
        await self.add_item("3", scope="PARTICIPANT", subcategory="pets")

        result = await generate_checklist(self.session, "proj-1")

        self.assertEqual(result.items_created, 2)
        self.assertEqual(result.errors, [])
        self.assertEqual(await self.checklist_keys(), [("1", None), ("2", "solo_applicant")])

    async def test_second_run_is_a_noop(self):
        await self.add_project()
        await self.add_item("1")
        await self.add_item("2", scope="PARTICIPANT")

        first = await generate_checklist(self.session, "proj-1")
        keys = await self.checklist_keys()
        second = await generate_checklist(self.session, "proj-1")

        self.assertEqual(first.items_created, 2)
        self.assertEqual(second.items_created, 0)
        self.assertEqual(second.errors, [MSG_ALREADY_GENERATED])
        self.assertEqual(await self.checklist_keys(), keys)

    async def test_generation_timestamp_is_stamped(self):
        project = await self.add_project()
        await self.add_item("1")
        self.assertIsNone(project.checklist_generated_at)
        await generate_checklist(self.session, "proj-1")
        self.assertIsNotNone(project.checklist_generated_at)

    async def test_two_applicants_fan_out(self):
        """Participant items get one row per applicant; project items a single null-designation row."""
        await self.add_project(applicant_count="two_applicants")
        await self.add_item("income", scope="PARTICIPANT")
        await self.add_item("address", scope="PROJECT")
        await self.add_item("has-pets", scope="PARTICIPANT", subcategory="pets", subcategory_1_initiator=True)

        result = await generate_checklist(self.session, "proj-1")

        self.assertEqual(result.items_created, 5)
        self.assertEqual(
            await self.checklist_keys(),
            [
                ("address", None),
                ("has-pets", "applicant_one"),
                ("has-pets", "applicant_two"),
                ("income", "applicant_one"),
                ("income", "applicant_two"),
            ],
        )

    async def test_three_or_more_applicants_share_two_designations(self):
        await self.add_project(applicant_count="three_or_more_applicants")
        await self.add_item("income", scope="PARTICIPANT")
        await generate_checklist(self.session, "proj-1")
        self.assertEqual(
            await self.checklist_keys(),
            [("income", "applicant_one"), ("income", "applicant_two")],
        )

    async def test_project_type_filtering(self):
        await self.add_project("refi", project_type="refinance")
        await self.add_project("buy", project_type="purchase")
        await self.add_item("purchase-only", project_types_applicable=["purchase"])
        await self.add_item("everywhere", project_types_applicable=[])

        await generate_checklist(self.session, "refi")
        await generate_checklist(self.session, "buy")

        self.assertEqual(await self.checklist_keys("refi"), [("everywhere", None)])
        self.assertEqual(await self.checklist_keys("buy"), [("everywhere", None), ("purchase-only", None)])

    async def test_conditional_items_excluded_regardless_of_order(self):
        await self.add_project()
        await self.add_item("dep-name", subcategory="dependents", priority=1)
        await self.add_item("has-dependents", subcategory="dependents", subcategory_1_initiator=True, priority=2)
        await self.add_item("dep-age", subcategory_2="dependents", priority=3)

        await generate_checklist(self.session, "proj-1")

        self.assertEqual(await self.checklist_keys(), [("has-dependents", None)])

    async def test_force_regenerate_replaces_rows_and_answers(self):
        await self.add_project()
        await self.add_item("1")
        await generate_checklist(self.session, "proj-1")
        await save_checklist_answer(self.session, "proj-1", "1", "hello")

        result = await generate_checklist(self.session, "proj-1", force_regenerate=True)

        self.assertEqual(result.items_created, 1)
        rows = (await self.session.execute(select(ChecklistItem))).scalars().all()
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0].status, "pending")
        self.assertIsNone(rows[0].text_value)

    async def test_missing_project_raises(self):
        with self.assertRaises(NotFoundError):
            await generate_checklist(self.session, "nope")

    async def test_unknown_scope_is_reported_not_raised(self):
        await self.add_project()
        await self.add_item("good")
        await self.add_item("bad", scope="HOUSEHOLD", item_name="Broken item")

        result = await generate_checklist(self.session, "proj-1")

        self.assertEqual(result.items_created, 1)
        self.assertEqual(len(result.errors), 1)
        self.assertTrue(result.errors[0].startswith("Failed to create item Broken item"))
        self.assertEqual(await self.checklist_keys(), [("good", None)])


class TestChecklistRows(DatabaseTestCase):
    async def asyncSetUp(self):
        await super().asyncSetUp()
        await self.add_category()
        await self.add_project(applicant_count="two_applicants")

    async def test_duplicate_insert_returns_none(self):
        await self.add_item("1")
        first = await insert_checklist_row(self.session, "proj-1", "1", ProjectScope())
        second = await insert_checklist_row(self.session, "proj-1", "1", ProjectScope())
        self.assertIsNotNone(first)
        self.assertIsNone(second)
        self.assertEqual(await self.checklist_keys(), [("1", None)])

    async def test_materialize_unlocked_subcategory_for_one_participant(self):
        await self.add_item("dep-name", scope="PARTICIPANT", subcategory="dependents")
        await self.add_item("dep-age", scope="PARTICIPANT", subcategory="dependents")
        await self.add_item("unrelated", scope="PARTICIPANT", subcategory="pets")

        first = await materialize_subcategory_items(self.session, "proj-1", ["dependents"], "applicant_two")
        again = await materialize_subcategory_items(self.session, "proj-1", ["dependents"], "applicant_two")

        self.assertEqual(first.items_created, 2)
        self.assertEqual(again.items_created, 0)
        self.assertEqual(again.items_skipped, 2)
        self.assertEqual(
            await self.checklist_keys(),
            [("dep-age", "applicant_two"), ("dep-name", "applicant_two")],
        )

    async def test_materialize_without_designation_fans_out(self):
        await self.add_item("dep-name", scope="PARTICIPANT", subcategory="dependents")
        result = await materialize_subcategory_items(self.session, "proj-1", ["dependents"])
        self.assertEqual(result.items_created, 2)

    async def test_remove_participant_rows(self):
        await self.add_item("income", scope="PARTICIPANT")
        await self.add_item("dep-name", scope="PARTICIPANT", subcategory="dependents")
        await generate_checklist(self.session, "proj-1")
        self.session.add(
            DependentItem(project_id="proj-1", item_id="dep-name", group_index=1, participant_designation="applicant_two")
        )
        await self.session.flush()

        removed = await remove_participant_rows(self.session, "proj-1", "applicant_two")

        self.assertEqual(removed, 2)
        self.assertEqual(await self.checklist_keys(), [("income", "applicant_one")])

    async def test_list_keeps_project_rows_for_a_participant(self):
        await self.add_item("address", scope="PROJECT", priority=1)
        await self.add_item("income", scope="PARTICIPANT", priority=2)
        await generate_checklist(self.session, "proj-1")

        rows = await list_checklist_items(self.session, "proj-1", participant_designation="applicant_one")

        self.assertEqual(
            [(row.item_id, row.participant_designation) for row, _ in rows],
            [("address", None), ("income", "applicant_one")],
        )


if __name__ == "__main__":
    unittest.main()
