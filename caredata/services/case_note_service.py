"""
Service case notes: one free-text note per client service.

A note takes its segment from its service, so access to the note
follows access to the service.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import ConflictError, NotFoundError
from caredata.models.document import ServiceCaseNote
from caredata.rbac.context import AuthContext
from caredata.services import assignment_service

logger = logging.getLogger(__name__)


async def _note_for(service_id: int, db: AsyncSession) -> ServiceCaseNote | None:
    result = await db.execute(
        select(ServiceCaseNote).where(ServiceCaseNote.service_id == service_id)
    )
    return result.scalar_one_or_none()


async def get_case_note(service_id: int, db: AsyncSession, ctx: AuthContext) -> ServiceCaseNote:
    await assignment_service.get_service(service_id, db, ctx)
    note = await _note_for(service_id, db)
    if note is None:
        raise NotFoundError("Case note not found")
    return note


async def create_case_note(
    service_id: int,
    note_text: str,
    db: AsyncSession,
    ctx: AuthContext,
) -> ServiceCaseNote:
    service = await assignment_service.get_service(service_id, db, ctx)
    if await _note_for(service_id, db) is not None:
        raise ConflictError("A case note already exists for this service")

    note = ServiceCaseNote(
        service_id=service_id,
        note_text=note_text,
        segment_id=service.segment_id,
        created_by=ctx.user_id,
        updated_by=ctx.user_id,
    )
    db.add(note)
    await db.flush()
    logger.info("Case note created for service %s by user %s", service_id, ctx.user_id)
    return note


async def update_case_note(
    service_id: int,
    note_text: str,
    db: AsyncSession,
    ctx: AuthContext,
) -> ServiceCaseNote:
    note = await get_case_note(service_id, db, ctx)
    note.note_text = note_text
    note.updated_by = ctx.user_id
    await db.flush()
    logger.info("Case note for service %s updated by user %s", service_id, ctx.user_id)
    return note
