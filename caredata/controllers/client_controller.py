"""
Client controller — person info.

Every route enforces:
1. Authentication + segment guard (via `scoped_context`)
2. Data scope (list filter / row-level check in the service)
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import scoped_context
from caredata.schemas import ClientOut, ClientRequest
from caredata.services import client_service

router = APIRouter(prefix="/api/person-info", tags=["Clients"])


@router.post("", response_model=ClientOut, status_code=201)
async def create_client(
    body: ClientRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    client = await client_service.create_client(
        db, ctx, body.model_dump(exclude={"segment_id"})
    )
    return ClientOut.model_validate(client)


@router.get("", response_model=list[ClientOut])
async def list_clients(
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
):
    clients = await client_service.list_clients(db, ctx, skip, limit)
    return [ClientOut.model_validate(c) for c in clients]


@router.get("/{client_id}", response_model=ClientOut)
async def get_client(
    client_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    client = await client_service.get_client(client_id, db, ctx)
    return ClientOut.model_validate(client)


@router.put("/{client_id}", response_model=ClientOut)
async def update_client(
    client_id: int,
    body: ClientRequest,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    client = await client_service.update_client(
        client_id, db, ctx, body.model_dump(exclude={"segment_id"})
    )
    return ClientOut.model_validate(client)
