from __future__ import annotations

from typing import Any, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import ChecklistItem, RequiredItem
from schemas.checklist import AnswerSave, EvaluationRequest
from services.checklist_answers import get_required_item_or_raise, save_checklist_answer
from services.checklist_generator import (
    generate_checklist,
    get_project_or_raise,
    list_checklist_items,
    materialize_subcategory_items,
    remove_participant_rows,
)
from services.conditional_logic import evaluate_conditional_logic
from services.typed_values import typed_value
from utils.case import dict_keys_to_camel, model_to_camel

router = APIRouter(prefix="/api/projects/{project_id}", tags=["checklist"])

Designation = Literal["solo_applicant", "applicant_one", "applicant_two"]


def _checklist_row_to_response(row: ChecklistItem, item: RequiredItem) -> dict[str, Any]:
    return dict_keys_to_camel({
        "id": row.id,
        "project_id": row.project_id,
        "item_id": row.item_id,
        "item_name": item.item_name,
        "item_type": item.item_type,
        "scope": item.scope,
        "category_id": item.category_id,
        "subcategory": item.subcategory,
        "priority": item.priority,
        "participant_designation": row.participant_designation,
        "status": row.status,
        "value": typed_value(row),
        "document_reference_id": row.document_reference_id,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    })


@router.post("/checklist/generate", response_model=dict)
async def generate(project_id: str, force: bool = False, db: AsyncSession = Depends(get_db)):
    result = await generate_checklist(db, project_id, force_regenerate=force)
    return model_to_camel(result)


@router.get("/checklist", response_model=list[dict])
async def list_checklist(
    project_id: str,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    await get_project_or_raise(db, project_id)
    rows = await list_checklist_items(db, project_id, category_id, participant_designation)
    return [_checklist_row_to_response(row, item) for row, item in rows]


@router.put("/checklist/{item_id}", response_model=dict)
async def save_answer(project_id: str, item_id: str, body: AnswerSave, db: AsyncSession = Depends(get_db)):
    row = await save_checklist_answer(db, project_id, item_id, body.value, body.participant_designation)
    item = await get_required_item_or_raise(db, item_id)
    await db.refresh(row)
    return _checklist_row_to_response(row, item)


@router.delete("/participants/{designation}", response_model=dict)
async def remove_participant(project_id: str, designation: Designation, db: AsyncSession = Depends(get_db)):
    removed = await remove_participant_rows(db, project_id, designation)
    return {"removed": removed}


@router.post("/categories/{category_id}/evaluate", response_model=dict)
async def evaluate(project_id: str, category_id: str, body: EvaluationRequest, db: AsyncSession = Depends(get_db)):
    """Evaluate saved answers, then create rows for the questions of unlocked subcategories."""
    await get_project_or_raise(db, project_id)
    result = await evaluate_conditional_logic(db, category_id, body.answers, body.item_id_to_form_field)
    materialized = 0
    if body.materialize and result.unlocked_subcategories:
        generation = await materialize_subcategory_items(
            db, project_id, result.unlocked_subcategories, body.participant_designation
        )
        materialized = generation.items_created
    out = model_to_camel(result)
    out["materialized"] = materialized
    return out
