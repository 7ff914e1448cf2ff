from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import ItemCategory
from services.completion import category_completion, overall_completion
from utils.case import model_to_camel

router = APIRouter(prefix="/api/projects/{project_id}/completion", tags=["completion"])


@router.get("", response_model=dict)
async def get_completion(
    project_id: str,
    category_ids: Optional[list[str]] = Query(None, alias="categoryIds"),
    participant_designation: Optional[Literal["solo_applicant", "applicant_one", "applicant_two"]] = Query(
        None, alias="participantDesignation"
    ),
    db: AsyncSession = Depends(get_db),
):
    """Completion per category (all categories when none are given) plus the overall total."""
    stmt = select(ItemCategory).order_by(ItemCategory.display_order.asc().nulls_last(), ItemCategory.name)
    if category_ids:
        stmt = stmt.where(ItemCategory.id.in_(category_ids))
    categories = [(c.id, c.name) for c in (await db.execute(stmt)).scalars().all()]
    infos = await category_completion(db, project_id, categories, participant_designation)
    return {
        "categories": [model_to_camel(i) for i in infos],
        "overall": model_to_camel(overall_completion(infos)),
    }
