import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import FormGenerationRule, ItemCategory, RequiredItem
from models.enums import GenerationRuleAction
from schemas.catalog import CategoryCreate, GenerationRuleCreate, RequiredItemCreate, RequiredItemUpdate
from schemas.conditions import parse_validation_rules
from services.checklist_answers import get_required_item_or_raise
from utils.case import dict_keys_to_camel

router = APIRouter(prefix="/api/catalog", tags=["catalog"])

MSG_CATEGORY_NOT_FOUND = "Category not found"
MSG_INVALID_RULES = "Invalid validation rules"
MSG_ITEM_EXISTS = "Item with this id already exists"
MSG_INVALID_RULE_ACTION = "targetCriteria.action must be add_items or remove_items"
MSG_RULE_EXISTS = "Rule with this id already exists"
MSG_RULE_NOT_FOUND = "Rule not found"

_ITEM_FIELDS = (
    "id",
    "category_id",
    "item_name",
    "item_type",
    "scope",
    "priority",
    "subcategory",
    "subcategory_2",
    "subcategory_3",
    "subcategory_4",
    "subcategory_5",
    "subcategory_1_initiator",
    "subcategory_2_initiator",
    "subcategory_3_initiator",
    "subcategory_4_initiator",
    "subcategory_5_initiator",
    "project_types_applicable",
    "validation_rules",
    "repeatable_group_target_table",
)


def _category_to_response(c: ItemCategory) -> dict[str, Any]:
    return {"id": c.id, "name": c.name, "displayOrder": c.display_order}


def _item_to_response(item: RequiredItem) -> dict[str, Any]:
    out = {field: getattr(item, field) for field in _ITEM_FIELDS}
    out["is_main_question"] = item.is_main_question
    out["is_initiator"] = item.is_initiator
    out["created_at"] = item.created_at.isoformat() if item.created_at else None
    return dict_keys_to_camel(out)


async def _ensure_category(db: AsyncSession, category_id: Optional[str]) -> None:
    if category_id is None:
        return
    found = await db.execute(select(ItemCategory.id).where(ItemCategory.id == category_id))
    if found.first() is None:
        raise HTTPException(status_code=400, detail=MSG_CATEGORY_NOT_FOUND)


def _ensure_rules(rules: Optional[dict[str, Any]]) -> None:
    if rules is None:
        return
    try:
        parse_validation_rules(rules)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"{MSG_INVALID_RULES}: {e}")


@router.get("/categories", response_model=list[dict])
async def list_categories(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(ItemCategory).order_by(ItemCategory.display_order.asc().nulls_last(), ItemCategory.name)
    )
    return [_category_to_response(c) for c in result.scalars().all()]


@router.post("/categories", response_model=dict, status_code=201)
async def create_category(body: CategoryCreate, db: AsyncSession = Depends(get_db)):
    category = ItemCategory(id=f"cat-{uuid.uuid4().hex[:12]}", name=body.name, display_order=body.display_order)
    db.add(category)
    await db.flush()
    return _category_to_response(category)


@router.get("/items", response_model=list[dict])
async def list_items(
    category_id: Optional[str] = Query(None, alias="categoryId"),
    db: AsyncSession = Depends(get_db),
):
    stmt = select(RequiredItem)
    if category_id:
        stmt = stmt.where(RequiredItem.category_id == category_id)
    stmt = stmt.order_by(RequiredItem.priority.asc().nulls_last(), RequiredItem.created_at.asc())
    result = await db.execute(stmt)
    return [_item_to_response(i) for i in result.scalars().all()]


@router.get("/items/{item_id}", response_model=dict)
async def get_item(item_id: str, db: AsyncSession = Depends(get_db)):
    return _item_to_response(await get_required_item_or_raise(db, item_id))


@router.post("/items", response_model=dict, status_code=201)
async def create_item(body: RequiredItemCreate, db: AsyncSession = Depends(get_db)):
    await _ensure_category(db, body.category_id)
    _ensure_rules(body.validation_rules)
    data = body.model_dump(by_alias=False, exclude={"id"})
    item = RequiredItem(id=body.id or f"item-{uuid.uuid4().hex[:12]}", **data)
    try:
        async with db.begin_nested():
            db.add(item)
    except IntegrityError:
        raise HTTPException(status_code=409, detail=MSG_ITEM_EXISTS)
    await db.refresh(item)
    return _item_to_response(item)


@router.patch("/items/{item_id}", response_model=dict)
async def update_item(item_id: str, body: RequiredItemUpdate, db: AsyncSession = Depends(get_db)):
    item = await get_required_item_or_raise(db, item_id)
    updates = body.model_dump(by_alias=False, exclude_unset=True)
    if "category_id" in updates:
        await _ensure_category(db, updates["category_id"])
    _ensure_rules(updates.get("validation_rules"))
    for field, value in updates.items():
        setattr(item, field, value)
    await db.flush()
    await db.refresh(item)
    return _item_to_response(item)


@router.delete("/items/{item_id}", status_code=204)
async def delete_item(item_id: str, db: AsyncSession = Depends(get_db)):
    item = await get_required_item_or_raise(db, item_id)
    await db.delete(item)
    await db.flush()


def _rule_to_response(rule: FormGenerationRule) -> dict[str, Any]:
    return dict_keys_to_camel({
        "id": rule.id,
        "rule_name": rule.rule_name,
        "rule_type": rule.rule_type,
        "condition_logic": rule.condition_logic,
        "target_criteria": rule.target_criteria,
        "priority": rule.priority,
        "is_active": rule.is_active,
    })


@router.get("/rules", response_model=list[dict])
async def list_rules(db: AsyncSession = Depends(get_db)):
    result = await db.execute(
        select(FormGenerationRule).order_by(FormGenerationRule.priority.asc().nulls_last(), FormGenerationRule.id)
    )
    return [_rule_to_response(r) for r in result.scalars().all()]


@router.post("/rules", response_model=dict, status_code=201)
async def create_rule(body: GenerationRuleCreate, db: AsyncSession = Depends(get_db)):
    if body.target_criteria.get("action") not in {a.value for a in GenerationRuleAction}:
        raise HTTPException(status_code=400, detail=MSG_INVALID_RULE_ACTION)
    rule = FormGenerationRule(
        id=body.id or f"rule-{uuid.uuid4().hex[:12]}",
        **body.model_dump(by_alias=False, exclude={"id"}),
    )
    try:
        async with db.begin_nested():
            db.add(rule)
    except IntegrityError:
        raise HTTPException(status_code=409, detail=MSG_RULE_EXISTS)
    return _rule_to_response(rule)


@router.delete("/rules/{rule_id}", status_code=204)
async def delete_rule(rule_id: str, db: AsyncSession = Depends(get_db)):
    result = await db.execute(select(FormGenerationRule).where(FormGenerationRule.id == rule_id))
    rule = result.scalar_one_or_none()
    if rule is None:
        raise HTTPException(status_code=404, detail=MSG_RULE_NOT_FOUND)
    await db.delete(rule)
    await db.flush()
