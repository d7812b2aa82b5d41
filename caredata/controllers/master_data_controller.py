"""
Master-data controller — service taxonomy & client assignment.

Reads and writes are open to any authenticated user in scope; only a
global admin may write unscoped entries.  An update without `segmentId`
keeps the row's segment.  Update conflicts surface as 409 with the
referencing client services attached (see `ReferentialConflictError`).
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.core.errors import NotFoundError
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import scoped_context
from caredata.schemas import (
    ClientAssignmentOut,
    ClientAssignmentRequest,
    MasterDataOut,
    MasterDataRequest,
    ReferentialConflictResponse,
    SuccessResponse,
)
from caredata.services import client_service, master_data_service

router = APIRouter(prefix="/api", tags=["Master Data"])


@router.get("/master-data", response_model=list[MasterDataOut])
async def list_master_data(
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(200, ge=1, le=500),
):
    rows = await master_data_service.list_master_data(db, ctx, skip, limit)
    return [MasterDataOut.model_validate(r) for r in rows]


@router.get(
    "/master-data/verify",
    response_model=SuccessResponse,
    responses={404: {"description": "Combination not found"}},
)
async def verify_combination(
    category: str = Query(..., min_length=1),
    service_type: str = Query(..., alias="type", min_length=1),
    provider: str = Query(""),
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    """Check that a category/type/provider combination exists in scope."""
    if not await master_data_service.exists(db, category, service_type, provider, ctx.segment_id):
        raise NotFoundError(
            "Service combination not found",
            details=(
                "This combination of category, type and provider does not exist in "
                "master data. Add it under Master Data before assigning it to a client."
            ),
        )
    return SuccessResponse()


@router.get("/master-data/{master_id}", response_model=MasterDataOut)
async def get_master_data(
    master_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    row = await master_data_service.get_master_data(master_id, db, ctx)
    return MasterDataOut.model_validate(row)


@router.post(
    "/master-data",
    response_model=MasterDataOut,
    status_code=201,
)
async def create_master_data(
    body: MasterDataRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    row = await master_data_service.create_master_data(
        db,
        ctx,
        service_category=body.service_category,
        service_type=body.service_type,
        service_provider=body.service_provider,
        active=body.active,
        segment_id=ctx.segment_id,
    )
    return MasterDataOut.model_validate(row)


@router.put(
    "/master-data/{master_id}",
    response_model=MasterDataOut,
    responses={409: {"model": ReferentialConflictResponse}},
)
async def update_master_data(
    master_id: int,
    body: MasterDataRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    row = await master_data_service.update_master_data(
        master_id,
        db,
        ctx,
        service_category=body.service_category,
        service_type=body.service_type,
        service_provider=body.service_provider,
        active=body.active,
        segment_id=ctx.segment_id,
    )
    return MasterDataOut.model_validate(row)


@router.post("/client-assignment", response_model=ClientAssignmentOut, status_code=201)
async def create_client_assignment(
    body: ClientAssignmentRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    """
    Record a client's care category/type in the taxonomy.

    An existing combination is reused rather than rejected; `created`
    tells the caller which happened.
    """
    client = await client_service.get_client(body.client_id, db, ctx.with_segment(None))
    segment_id = ctx.segment_id if ctx.segment_id is not None else client.segment_id
    row, created = await master_data_service.ensure_master_data(
        db,
        ctx,
        service_category=body.care_category,
        service_type=body.care_type,
        segment_id=segment_id,
    )
    return ClientAssignmentOut(
        **MasterDataOut.model_validate(row).model_dump(),
        created=created,
    )
