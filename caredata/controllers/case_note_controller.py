"""Case-note controller — one note per client service."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import scoped_context
from caredata.schemas import CaseNoteOut, CreateCaseNoteRequest, UpdateCaseNoteRequest
from caredata.services import case_note_service

router = APIRouter(prefix="/api/service-case-notes", tags=["Case Notes"])


@router.get("/{service_id}", response_model=CaseNoteOut)
async def get_case_note(
    service_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    note = await case_note_service.get_case_note(service_id, db, ctx)
    return CaseNoteOut.model_validate(note)


@router.post("", response_model=CaseNoteOut, status_code=201)
async def create_case_note(
    body: CreateCaseNoteRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    note = await case_note_service.create_case_note(body.service_id, body.note_text, db, ctx)
    return CaseNoteOut.model_validate(note)


@router.put("/{service_id}", response_model=CaseNoteOut)
async def update_case_note(
    service_id: int,
    body: UpdateCaseNoteRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    note = await case_note_service.update_case_note(service_id, body.note_text, db, ctx)
    return CaseNoteOut.model_validate(note)
