"""
Shared setup for the checklist tests: a fresh in-memory database per test case
and small factories for catalog entries and projects.
"""
import unittest

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import models  # noqa: F401
from database import Base, enable_sqlite_savepoints
from models import ChecklistItem, ItemCategory, Project, RequiredItem


class DatabaseTestCase(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.engine = create_async_engine(
            "sqlite+aiosqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        enable_sqlite_savepoints(self.engine)
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        self.session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        self.session = self.session_factory()

    async def asyncTearDown(self):
        await self.session.close()
        await self.engine.dispose()

    async def add_category(self, category_id="cat-1", name="General", display_order=None):
        category = ItemCategory(id=category_id, name=name, display_order=display_order)
        self.session.add(category)
        await self.session.flush()
        return category

    async def add_item(self, item_id, category_id="cat-1", **fields):
        fields.setdefault("item_name", f"Item {item_id}")
        fields.setdefault("item_type", "text")
        fields.setdefault("scope", "PROJECT")
        item = RequiredItem(id=item_id, category_id=category_id, **fields)
        self.session.add(item)
        await self.session.flush()
        return item

    async def add_project(self, project_id="proj-1", project_type="purchase", applicant_count="one_applicant"):
        project = Project(
            id=project_id,
            brokerage_id="brokerage-1",
            name=f"Project {project_id}",
            project_type=project_type,
            applicant_count=applicant_count,
        )
        self.session.add(project)
        await self.session.flush()
        return project

    async def checklist_keys(self, project_id="proj-1"):
        """(item_id, participant_designation) of every checklist row of a project."""
        result = await self.session.execute(
            select(ChecklistItem.item_id, ChecklistItem.participant_designation).where(
                ChecklistItem.project_id == project_id
            )
        )
        return sorted(result.all(), key=lambda r: (r[0], r[1] or ""))
