from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from schemas.checklist import GroupAnswerSave, GroupCreate
from services.checklist_generator import get_project_or_raise
from services.repeatable_groups import RepeatableGroupManager
from utils.case import dict_keys_to_camel, model_to_camel

router = APIRouter(prefix="/api/projects/{project_id}/groups", tags=["groups"])

Designation = Literal["solo_applicant", "applicant_one", "applicant_two"]


async def _manager(
    project_id: str,
    target_table: str,
    participant_designation: Optional[Designation],
    db: AsyncSession,
) -> RepeatableGroupManager:
    await get_project_or_raise(db, project_id)
    return RepeatableGroupManager(db, project_id, target_table, participant_designation)


@router.get("/{target_table}", response_model=list[dict])
async def list_groups(
    project_id: str,
    target_table: str,
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    manager = await _manager(project_id, target_table, participant_designation, db)
    return [model_to_camel(g) for g in await manager.load_all_groups()]


@router.post("/{target_table}", response_model=dict, status_code=201)
async def create_group(
    project_id: str,
    target_table: str,
    body: GroupCreate,
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    manager = await _manager(project_id, target_table, participant_designation, db)
    group_index = await manager.create_group(body.subcategory)
    return {"groupIndex": group_index}


@router.get("/{target_table}/{group_index}", response_model=dict)
async def get_group(
    project_id: str,
    target_table: str,
    group_index: int,
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    manager = await _manager(project_id, target_table, participant_designation, db)
    answers = await manager.load_group_answers(group_index)
    return dict_keys_to_camel({"group_index": group_index, "answers": answers})


@router.put("/{target_table}/{group_index}/answers/{item_id}", response_model=dict)
async def save_group_answer(
    project_id: str,
    target_table: str,
    group_index: int,
    item_id: str,
    body: GroupAnswerSave,
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    manager = await _manager(project_id, target_table, participant_designation, db)
    await manager.save_answer(item_id, group_index, body.value, body.item_type)
    return {"saved": True}


@router.delete("/{target_table}/{group_index}", response_model=dict)
async def delete_group(
    project_id: str,
    target_table: str,
    group_index: int,
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    manager = await _manager(project_id, target_table, participant_designation, db)
    return {"deleted": await manager.delete_group(group_index)}


@router.post("/{target_table}/cleanup", response_model=dict)
async def cleanup_groups(
    project_id: str,
    target_table: str,
    participant_designation: Optional[Designation] = Query(None, alias="participantDesignation"),
    db: AsyncSession = Depends(get_db),
):
    """Called when the group view closes; drops groups that were opened but never answered."""
    manager = await _manager(project_id, target_table, participant_designation, db)
    return {"removed": await manager.cleanup_empty_groups()}
