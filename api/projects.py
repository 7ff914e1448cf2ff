from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from database import get_db
from models import Project, ProjectDocument
from schemas.project import DocumentCreate, ProjectCreate
from services.checklist_answers import get_required_item_or_raise
from services.checklist_generator import generate_checklist, get_project_or_raise

router = APIRouter(prefix="/api/projects", tags=["projects"])


def _project_to_response(p: Project) -> dict[str, Any]:
    return {
        "id": p.id,
        "brokerageId": p.brokerage_id,
        "name": p.name,
        "description": p.description,
        "projectType": p.project_type,
        "applicantCount": p.applicant_count,
        "hasGuarantor": p.has_guarantor,
        "status": p.status,
        "checklistGeneratedAt": p.checklist_generated_at.isoformat() if p.checklist_generated_at else None,
        "createdAt": p.created_at.isoformat() if p.created_at else None,
        "updatedAt": p.updated_at.isoformat() if p.updated_at else None,
    }


def _document_to_response(d: ProjectDocument) -> dict[str, Any]:
    return {
        "id": d.id,
        "projectId": d.project_id,
        "itemId": d.item_id,
        "participantDesignation": d.participant_designation,
        "fileName": d.file_name,
        "filePath": d.file_path,
        "fileSize": d.file_size,
        "mimeType": d.mime_type,
        "status": d.status,
    }


@router.get("", response_model=list[dict])
async def list_projects(brokerage_id: str | None = None, db: AsyncSession = Depends(get_db)):
    stmt = select(Project)
    if brokerage_id:
        stmt = stmt.where(Project.brokerage_id == brokerage_id)
    result = await db.execute(stmt.order_by(Project.updated_at.desc()))
    return [_project_to_response(p) for p in result.scalars().all()]


@router.get("/{project_id}", response_model=dict)
async def get_project(project_id: str, db: AsyncSession = Depends(get_db)):
    return _project_to_response(await get_project_or_raise(db, project_id))


@router.post("", response_model=dict, status_code=201)
async def create_project(body: ProjectCreate, generate: bool = True, db: AsyncSession = Depends(get_db)):
    """Create a project and, unless generate=false, materialize its checklist."""
    project = Project(
        id=f"proj-{uuid.uuid4().hex[:12]}",
        brokerage_id=body.brokerage_id,
        name=body.name,
        description=body.description,
        project_type=body.project_type,
        applicant_count=body.applicant_count,
        has_guarantor=body.has_guarantor,
        status="active",
    )
    db.add(project)
    await db.flush()
    if generate:
        await generate_checklist(db, project.id)
    await db.refresh(project)
    return _project_to_response(project)


@router.post("/{project_id}/documents", response_model=dict, status_code=201)
async def add_document(project_id: str, body: DocumentCreate, db: AsyncSession = Depends(get_db)):
    await get_project_or_raise(db, project_id)
    if body.item_id is not None:
        await get_required_item_or_raise(db, body.item_id)
    if not body.file_path:
        raise HTTPException(status_code=400, detail="filePath is required")
    document = ProjectDocument(
        id=f"doc-{uuid.uuid4().hex[:12]}",
        project_id=project_id,
        item_id=body.item_id,
        participant_designation=body.participant_designation,
        file_name=body.file_name,
        file_path=body.file_path,
        file_size=body.file_size,
        mime_type=body.mime_type,
        status="submitted",
    )
    db.add(document)
    await db.flush()
    return _document_to_response(document)
