"""
Client (person info) service.

All reads go through the caller's data scope; writes record the
authorized segment from the request.  Dates arrive as `date` objects
and are persisted as ISO strings.
"""

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import NotFoundError
from caredata.models.client import Client
from caredata.rbac.context import AuthContext, segment_filter
from caredata.rbac.segment_guard import authorize_row

logger = logging.getLogger(__name__)


def _as_columns(fields: dict) -> dict:
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in fields.items()}


async def get_client(client_id: int, db: AsyncSession, ctx: AuthContext) -> Client:
    client = await db.get(Client, client_id)
    if client is None:
        raise NotFoundError("Client not found")
    await authorize_row(ctx, client.segment_id, db)
    return client


async def list_clients(
    db: AsyncSession,
    ctx: AuthContext,
    skip: int = 0,
    limit: int = 100,
) -> list[Client]:
    stmt = (
        select(Client)
        .where(segment_filter(Client.segment_id, ctx))
        .order_by(Client.last_name, Client.first_name, Client.id)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_client(db: AsyncSession, ctx: AuthContext, fields: dict) -> Client:
    columns = _as_columns(fields)
    columns["segment_id"] = ctx.segment_id
    client = Client(**columns, created_by=ctx.user_id)
    db.add(client)
    await db.flush()
    logger.info("Client %s created by user %s (segment=%s)", client.id, ctx.user_id, ctx.segment_id)
    return client


async def update_client(
    client_id: int,
    db: AsyncSession,
    ctx: AuthContext,
    fields: dict,
) -> Client:
    # Row check on the current segment; the target segment was checked by the guard
    client = await get_client(client_id, db, ctx.with_segment(None))
    columns = _as_columns(fields)
    columns["segment_id"] = ctx.segment_id if ctx.segment_id is not None else client.segment_id
    for key, value in columns.items():
        setattr(client, key, value)
    await db.flush()
    logger.info("Client %s updated by user %s", client.id, ctx.user_id)
    return client
