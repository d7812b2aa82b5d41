"""
Client-service controller — assigning services to clients.

Creation is rejected before any write when the master-data
combination is missing or inactive.  PATCH only changes the status.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import scoped_context
from caredata.schemas import ClientServiceOut, ClientServiceRequest, UpdateServiceStatusRequest
from caredata.services import assignment_service

router = APIRouter(prefix="/api/client-services", tags=["Client Services"])


@router.get("", response_model=list[ClientServiceOut])
async def list_services(
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    services = await assignment_service.list_services(db, ctx, skip, limit)
    return [ClientServiceOut.model_validate(s) for s in services]


@router.post("", response_model=ClientServiceOut, status_code=201)
async def create_service(
    body: ClientServiceRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    service = await assignment_service.create_service(
        db,
        ctx,
        client_id=body.client_id,
        service_category=body.service_category,
        service_type=body.service_type,
        service_provider=body.service_provider,
        service_start_date=body.service_start_date,
        service_days=body.service_days,
        service_hours=body.service_hours,
        status=body.status,
    )
    return ClientServiceOut.model_validate(service)


@router.get("/client/{client_id}", response_model=list[ClientServiceOut])
async def list_services_for_client(
    client_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    services = await assignment_service.list_services_for_client(client_id, db, ctx)
    return [ClientServiceOut.model_validate(s) for s in services]


@router.get("/{service_id}", response_model=ClientServiceOut)
async def get_service(
    service_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    service = await assignment_service.get_service(service_id, db, ctx)
    return ClientServiceOut.model_validate(service)


@router.patch("/{service_id}", response_model=ClientServiceOut)
async def update_status(
    service_id: int,
    body: UpdateServiceStatusRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    service = await assignment_service.update_status(service_id, body.status, db, ctx)
    return ClientServiceOut.model_validate(service)
