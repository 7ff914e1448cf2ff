"""
Seed a demonstration item catalog (categories, questions, repeatable groups, generation rules).
Run: python -m scripts.seed_catalog (from the repository root, with DB reachable).
"""
import asyncio
import os
import sys

# Add parent so we can import from the repository root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import structlog
from sqlalchemy import select

from database import AsyncSessionLocal, init_db
from models import FormGenerationRule, ItemCategory, RequiredItem

logger = structlog.get_logger()


CATEGORIES_DATA = [
    {"id": "personal", "name": "Personal information", "display_order": 1},
    {"id": "income", "name": "Income", "display_order": 2},
    {"id": "liabilities", "name": "Liabilities", "display_order": 3},
    {"id": "property", "name": "Property", "display_order": 4},
    {"id": "guarantor", "name": "Guarantor", "display_order": 5},
]

ITEMS_DATA = [
    # Personal
    {"id": "full-name", "category_id": "personal", "item_name": "Full legal name", "item_type": "text", "scope": "PARTICIPANT", "priority": 1},
    {"id": "birth-date", "category_id": "personal", "item_name": "Date of birth", "item_type": "date", "scope": "PARTICIPANT", "priority": 2},
    {"id": "id-document", "category_id": "personal", "item_name": "Government-issued ID", "item_type": "document", "scope": "PARTICIPANT", "priority": 3},
    {
        "id": "has-dependents",
        "category_id": "personal",
        "item_name": "Do you have dependents?",
        "item_type": "single_choice_dropdown",
        "scope": "PARTICIPANT",
        "priority": 4,
        "subcategory": "dependents",
        "subcategory_1_initiator": True,
        "validation_rules": {"dependents": [{"type": "equals", "value": "TRUE"}]},
    },
    {
        "id": "dependents-group",
        "category_id": "personal",
        "item_name": "Dependents",
        "item_type": "repeatable_group",
        "scope": "PARTICIPANT",
        "priority": 5,
        "subcategory": "dependents",
        "repeatable_group_target_table": "project_dependent_items",
    },
    {"id": "dependent-name", "category_id": "personal", "item_name": "Dependent name", "item_type": "text", "scope": "PARTICIPANT", "priority": 6, "subcategory": "dependent_details"},
    {"id": "dependent-age", "category_id": "personal", "item_name": "Dependent age", "item_type": "number", "scope": "PARTICIPANT", "priority": 7, "subcategory": "dependent_details"},
    # Income
    {
        "id": "employment-status",
        "category_id": "income",
        "item_name": "Employment status",
        "item_type": "single_choice_dropdown",
        "scope": "PARTICIPANT",
        "priority": 10,
        "validation_rules": {
            "self_employed": [{"type": "equals", "value": "self_employed"}],
            "salaried": [{"type": "equals", "value": "salaried"}],
        },
    },
    {
        "id": "annual-income",
        "category_id": "income",
        "item_name": "Gross annual income",
        "item_type": "number",
        "scope": "PARTICIPANT",
        "priority": 11,
        "validation_rules": {"high_income": [{"type": "greaterThan", "value": 250000}]},
    },
    {"id": "business-name", "category_id": "income", "item_name": "Business name", "item_type": "text", "scope": "PARTICIPANT", "priority": 12, "subcategory": "self_employed"},
    {"id": "tax-returns", "category_id": "income", "item_name": "Last two tax returns", "item_type": "document", "scope": "PARTICIPANT", "priority": 13, "subcategory": "self_employed"},
    {"id": "employer-name", "category_id": "income", "item_name": "Employer name", "item_type": "text", "scope": "PARTICIPANT", "priority": 14, "subcategory": "salaried"},
    {"id": "asset-statement", "category_id": "income", "item_name": "Investment asset statement", "item_type": "document", "scope": "PARTICIPANT", "priority": 15, "subcategory": "high_income"},
    {
        "id": "secondary-incomes",
        "category_id": "income",
        "item_name": "Other sources of income",
        "item_type": "repeatable_group",
        "scope": "PARTICIPANT",
        "priority": 16,
        "repeatable_group_target_table": "project_secondary_income_items",
    },
    {"id": "secondary-income-source", "category_id": "income", "item_name": "Income source", "item_type": "text", "scope": "PARTICIPANT", "priority": 17, "subcategory": "secondary_income"},
    {"id": "secondary-income-amount", "category_id": "income", "item_name": "Annual amount", "item_type": "number", "scope": "PARTICIPANT", "priority": 18, "subcategory": "secondary_income"},
    # Liabilities
    {
        "id": "debts",
        "category_id": "liabilities",
        "item_name": "Outstanding debts",
        "item_type": "repeatable_group",
        "scope": "PARTICIPANT",
        "priority": 20,
        "repeatable_group_target_table": "project_debt_items",
    },
    {"id": "debt-kind", "category_id": "liabilities", "item_name": "Kind of debt", "item_type": "multiple_choice_checkbox", "scope": "PARTICIPANT", "priority": 21, "subcategory": "debt"},
    {"id": "debt-balance", "category_id": "liabilities", "item_name": "Remaining balance", "item_type": "number", "scope": "PARTICIPANT", "priority": 22, "subcategory": "debt"},
    # Property
    {"id": "property-address", "category_id": "property", "item_name": "Property address", "item_type": "text", "scope": "PROJECT", "priority": 30},
    {"id": "purchase-price", "category_id": "property", "item_name": "Purchase price", "item_type": "number", "scope": "PROJECT", "priority": 31, "project_types_applicable": ["first_home_purchase", "purchase", "investment_property"]},
    {"id": "current-mortgage", "category_id": "property", "item_name": "Current mortgage statement", "item_type": "document", "scope": "PROJECT", "priority": 32, "project_types_applicable": ["refinance", "home_equity_loan"]},
    # Guarantor
    {"id": "guarantor-name", "category_id": "guarantor", "item_name": "Guarantor full name", "item_type": "text", "scope": "PROJECT", "priority": 40},
    {"id": "guarantor-consent", "category_id": "guarantor", "item_name": "Signed guarantor consent", "item_type": "document", "scope": "PROJECT", "priority": 41},
]

RULES_DATA = [
    {
        "id": "no-guarantor",
        "rule_name": "Skip guarantor questions without a guarantor",
        "condition_logic": {"has_guarantor": False},
        "target_criteria": {"action": "remove_items", "item_categories": ["guarantor"]},
        "priority": 1,
    },
]


async def seed():
    await init_db()
    async with AsyncSessionLocal() as session:
        for data in CATEGORIES_DATA:
            existing = await session.execute(select(ItemCategory).where(ItemCategory.id == data["id"]))
            if existing.scalar_one_or_none():
                logger.info("category_exists", category_id=data["id"])
                continue
            session.add(ItemCategory(**data))
            logger.info("category_seeded", category_id=data["id"])
        await session.flush()
        for data in ITEMS_DATA:
            existing = await session.execute(select(RequiredItem).where(RequiredItem.id == data["id"]))
            if existing.scalar_one_or_none():
                logger.info("item_exists", item_id=data["id"])
                continue
            session.add(RequiredItem(**data))
            logger.info("item_seeded", item_id=data["id"])
        for data in RULES_DATA:
            existing = await session.execute(select(FormGenerationRule).where(FormGenerationRule.id == data["id"]))
            if existing.scalar_one_or_none():
                logger.info("rule_exists", rule_id=data["id"])
                continue
            session.add(FormGenerationRule(**data))
            logger.info("rule_seeded", rule_id=data["id"])
        await session.commit()
    logger.info("seed_complete", categories=len(CATEGORIES_DATA), items=len(ITEMS_DATA), rules=len(RULES_DATA))


if __name__ == "__main__":
    asyncio.run(seed())
