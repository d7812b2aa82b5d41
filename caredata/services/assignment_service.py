"""
Client-service (assignment) service.

Creation is gated by the master-data guard: the (category, type,
provider, segment) combination must exist and be active before any
row is written.  After creation only `status` may change.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import NotFoundError, ValidationError
from caredata.models.client_service import ClientService, ServiceStatus
from caredata.rbac.context import AuthContext, segment_filter
from caredata.rbac.segment_guard import authorize_row, authorize_segment
from caredata.services import client_service, master_data_service

logger = logging.getLogger(__name__)


async def get_service(service_id: int, db: AsyncSession, ctx: AuthContext) -> ClientService:
    service = await db.get(ClientService, service_id)
    if service is None:
        raise NotFoundError("Client service not found")
    await authorize_row(ctx, service.segment_id, db)
    return service


async def list_services(
    db: AsyncSession,
    ctx: AuthContext,
    skip: int = 0,
    limit: int = 100,
) -> list[ClientService]:
    stmt = (
        select(ClientService)
        .where(segment_filter(ClientService.segment_id, ctx))
        .order_by(ClientService.created_at.desc(), ClientService.id.desc())
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def list_services_for_client(
    client_id: int,
    db: AsyncSession,
    ctx: AuthContext,
) -> list[ClientService]:
    await client_service.get_client(client_id, db, ctx.with_segment(None))
    stmt = (
        select(ClientService)
        .where(ClientService.client_id == client_id)
        .where(segment_filter(ClientService.segment_id, ctx))
        .order_by(ClientService.service_start_date, ClientService.id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_service(
    db: AsyncSession,
    ctx: AuthContext,
    *,
    client_id: int,
    service_category: str,
    service_type: str,
    service_provider: str,
    service_start_date,
    service_days: list[str],
    service_hours: int,
    status: ServiceStatus = ServiceStatus.PLANNED,
) -> ClientService:
    client = await client_service.get_client(client_id, db, ctx.with_segment(None))

    # Segment inherited from the client unless the request names one
    segment_id = ctx.segment_id if ctx.segment_id is not None else client.segment_id
    await authorize_segment(ctx, segment_id, db)

    if not await master_data_service.exists(
        db,
        service_category,
        service_type,
        service_provider,
        segment_id,
        active_only=True,
    ):
        logger.info(
            "Rejected client service for client %s: no active master data %s/%s/%s (segment=%s)",
            client_id,
            service_category,
            service_type,
            service_provider,
            segment_id,
        )
        raise ValidationError(
            "Invalid service combination",
            details=(
                "The selected service category, type and provider do not match an "
                "active master data entry for this segment"
            ),
        )

    service = ClientService(
        client_id=client_id,
        service_category=service_category,
        service_type=service_type,
        service_provider=service_provider,
        service_start_date=service_start_date,
        service_days=list(service_days),
        service_hours=service_hours,
        status=status,
        segment_id=segment_id,
        created_by=ctx.user_id,
    )
    db.add(service)
    await db.flush()
    logger.info("Client service %s created for client %s", service.id, client_id)
    return service


async def update_status(
    service_id: int,
    status: ServiceStatus,
    db: AsyncSession,
    ctx: AuthContext,
) -> ClientService:
    service = await get_service(service_id, db, ctx)
    previous = service.status
    service.status = status
    await db.flush()
    logger.info(
        "Client service %s status %s -> %s by user %s",
        service_id,
        previous.value,
        status.value,
        ctx.user_id,
    )
    return service
