"""
Company / segment controller.

Company and segment management is admin-only.  The segment picker
endpoint (`GET /api/user/segments`) is open to any authenticated user.
"""

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import get_auth_context, guard_segment, require_role
from caredata.schemas import (
    CompanyOut,
    CreateCompanyRequest,
    CreateSegmentRequest,
    SegmentOut,
    UpdateCompanyRequest,
    UpdateSegmentRequest,
)
from caredata.services import directory_service

router = APIRouter(prefix="/api", tags=["Companies"])

require_admin = require_role("admin")


# ── Companies ────────────────────────────────────────────────────────
@router.post("/companies", response_model=CompanyOut, status_code=201)
async def create_company(
    body: CreateCompanyRequest,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await directory_service.create_company(db, ctx, **body.model_dump())
    return CompanyOut.model_validate(company)


@router.get("/companies", response_model=list[CompanyOut])
async def list_companies(
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    companies = await directory_service.list_companies(db, ctx, skip, limit)
    return [CompanyOut.model_validate(c) for c in companies]


@router.get("/companies/{company_id}", response_model=CompanyOut)
async def get_company(
    company_id: int,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await directory_service.get_company(company_id, db, ctx)
    return CompanyOut.model_validate(company)


@router.put("/companies/{company_id}", response_model=CompanyOut)
async def update_company(
    company_id: int,
    body: UpdateCompanyRequest,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await directory_service.update_company(
        company_id, db, ctx, **body.model_dump(exclude_unset=True)
    )
    return CompanyOut.model_validate(company)


# ── Segments ─────────────────────────────────────────────────────────
@router.post("/companies/{company_id}/segments", response_model=SegmentOut, status_code=201)
async def create_segment(
    company_id: int,
    body: CreateSegmentRequest,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    segment = await directory_service.create_segment(company_id, body.segment_name, db, ctx)
    return SegmentOut.model_validate(segment)


@router.get("/companies/{company_id}/segments", response_model=list[SegmentOut])
async def list_company_segments(
    company_id: int,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    segments = await directory_service.list_company_segments(company_id, db, ctx)
    return [SegmentOut.model_validate(s) for s in segments]


@router.put(
    "/segments/{segmentId}",
    response_model=SegmentOut,
    dependencies=[Depends(guard_segment)],
)
async def rename_segment(
    body: UpdateSegmentRequest,
    segment_id: int = Path(alias="segmentId"),
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    segment = await directory_service.rename_segment(segment_id, body.segment_name, db, ctx)
    return SegmentOut.model_validate(segment)


@router.get("/user/segments", response_model=list[SegmentOut])
async def my_segments(
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    """Segments of the caller's company, for the front-end picker."""
    segments = await directory_service.segments_for_user(ctx, db)
    return [SegmentOut.model_validate(s) for s in segments]
