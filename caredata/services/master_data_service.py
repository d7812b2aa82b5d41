"""
Master-data service & consistency guard.

Client services reference a master-data combination by value:
(service_category, service_type, service_provider, segment_id).
No DB cascade protects that link, so this module does:

- `exists`                    — gate client-service creation.
- `find_referencing_services` — block updates while live rows use the
                                combination (409 FOREIGN_KEY_CONSTRAINT).
- `ensure_master_data`        — atomic get-or-create for the
                                client-assignment flow; returns whether
                                the row was newly created.

`segment_id` is part of a combination's identity: NULL and a concrete
segment never match each other.

Concurrency: `update_master_data` locks the row, checks references and
applies the change inside the request transaction.  A client service
inserted by another transaction between the check and the commit is an
accepted race.
"""

import logging

from sqlalchemy import ColumnElement, and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ReferentialConflictError,
)
from caredata.models.client import Client
from caredata.models.client_service import ClientService
from caredata.models.master_data import MasterData
from caredata.rbac.context import AuthContext, segment_filter
from caredata.rbac.segment_guard import authorize_row
from caredata.schemas import ReferencingService

logger = logging.getLogger(__name__)


def _segment_matches(column, segment_id: int | None) -> ColumnElement[bool]:
    # `= NULL` never matches in SQL; unscoped needs IS NULL
    if segment_id is None:
        return column.is_(None)
    return column == segment_id


def _combination_clause(
    model,
    category: str,
    service_type: str,
    provider: str,
    segment_id: int | None,
) -> ColumnElement[bool]:
    return and_(
        model.service_category == category,
        model.service_type == service_type,
        model.service_provider == provider,
        _segment_matches(model.segment_id, segment_id),
    )


def _authorize_unscoped_write(ctx: AuthContext, segment_id: int | None) -> None:
    # Unscoped rows are listed to every company
    if segment_id is None and not ctx.is_global_admin:
        raise AuthorizationError(
            "Access denied: Only a global admin can manage unscoped master data"
        )


def _describe(category: str, service_type: str, provider: str, segment_id: int | None) -> str:
    scope = f"segment {segment_id}" if segment_id is not None else "global"
    return f"'{category} / {service_type} / {provider}' ({scope})"


# ── Consistency checks ───────────────────────────────────────────────


async def find_combination(
    db: AsyncSession,
    category: str,
    service_type: str,
    provider: str,
    segment_id: int | None = None,
) -> MasterData | None:
    stmt = (
        select(MasterData)
        .where(_combination_clause(MasterData, category, service_type, provider, segment_id))
        .order_by(MasterData.id)
        .limit(1)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def exists(
    db: AsyncSession,
    category: str,
    service_type: str,
    provider: str,
    segment_id: int | None = None,
    *,
    active_only: bool = False,
) -> bool:
    row = await find_combination(db, category, service_type, provider, segment_id)
    if row is None:
        return False
    return row.active or not active_only


async def find_referencing_services(
    db: AsyncSession,
    category: str,
    service_type: str,
    provider: str,
    segment_id: int | None = None,
) -> list[dict]:
    """Client services using the exact combination, as conflict rows."""
    stmt = (
        select(
            Client.first_name,
            Client.last_name,
            ClientService.status,
            ClientService.service_start_date,
        )
        .join(Client, Client.id == ClientService.client_id)
        .where(
            _combination_clause(ClientService, category, service_type, provider, segment_id)
        )
        .order_by(ClientService.id)
    )
    result = await db.execute(stmt)
    return [
        ReferencingService(
            client_name=f"{first} {last}",
            status=status,
            service_start_date=start,
        ).model_dump(by_alias=True, mode="json")
        for first, last, status, start in result.all()
    ]


# ── Queries ──────────────────────────────────────────────────────────


async def get_master_data(master_id: int, db: AsyncSession, ctx: AuthContext) -> MasterData:
    row = await db.get(MasterData, master_id)
    if row is None:
        raise NotFoundError("Master data not found")
    await authorize_row(ctx, row.segment_id, db)
    return row


async def list_master_data(
    db: AsyncSession,
    ctx: AuthContext,
    skip: int = 0,
    limit: int = 200,
) -> list[MasterData]:
    stmt = (
        select(MasterData)
        .where(segment_filter(MasterData.segment_id, ctx))
        .order_by(MasterData.service_category, MasterData.service_type, MasterData.id)
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


# ── Writes ───────────────────────────────────────────────────────────


async def create_master_data(
    db: AsyncSession,
    ctx: AuthContext,
    *,
    service_category: str,
    service_type: str,
    service_provider: str,
    active: bool = True,
    segment_id: int | None = None,
) -> MasterData:
    _authorize_unscoped_write(ctx, segment_id)
    if await exists(db, service_category, service_type, service_provider, segment_id):
        raise ConflictError(
            "This combination of category, type, and provider already exists",
            details=_describe(service_category, service_type, service_provider, segment_id),
        )

    row = MasterData(
        service_category=service_category,
        service_type=service_type,
        service_provider=service_provider,
        active=active,
        segment_id=segment_id,
        created_by=ctx.user_id,
    )
    db.add(row)
    await db.flush()
    logger.info("Master data %s created: %r", row.id, row)
    return row


async def ensure_master_data(
    db: AsyncSession,
    ctx: AuthContext,
    *,
    service_category: str,
    service_type: str,
    service_provider: str = "",
    segment_id: int | None = None,
) -> tuple[MasterData, bool]:
    """
    Get-or-create a combination.  Returns ``(row, created)``.

    Two concurrent callers may both miss the existence check; the loser
    of the unique-constraint race rolls back its savepoint and gets the
    winner's row.  Where the store enforces no constraint (NULL segment
    on Postgres) a duplicate row may appear, which is tolerated.
    """
    existing = await find_combination(
        db, service_category, service_type, service_provider, segment_id
    )
    if existing is not None:
        logger.info("Master data already exists, reusing %s", existing.id)
        return existing, False

    _authorize_unscoped_write(ctx, segment_id)
    row = MasterData(
        service_category=service_category,
        service_type=service_type,
        service_provider=service_provider,
        active=True,
        segment_id=segment_id,
        created_by=ctx.user_id,
    )
    try:
        async with db.begin_nested():
            db.add(row)
    except IntegrityError:
        logger.info(
            "Master data %s inserted concurrently, reusing existing row",
            _describe(service_category, service_type, service_provider, segment_id),
        )
        winner = await find_combination(
            db, service_category, service_type, service_provider, segment_id
        )
        if winner is None:
            raise
        return winner, False

    return row, True


async def update_master_data(
    master_id: int,
    db: AsyncSession,
    ctx: AuthContext,
    *,
    service_category: str,
    service_type: str,
    service_provider: str,
    active: bool,
    segment_id: int | None,
) -> MasterData:
    """
    Update a master-data row unless client services still reference it.

    The reference check uses the row's *current* combination; on
    conflict the row is left unchanged and a 409 carrying the impacted
    clients is raised.  `segment_id=None` keeps the row's segment.
    """
    stmt = select(MasterData).where(MasterData.id == master_id).with_for_update()
    row = (await db.execute(stmt)).scalar_one_or_none()
    if row is None:
        raise NotFoundError("Master data not found")
    await authorize_row(ctx.with_segment(None), row.segment_id, db)
    _authorize_unscoped_write(ctx, row.segment_id)
    if segment_id is None:
        segment_id = row.segment_id

    referencing = await find_referencing_services(
        db, row.service_category, row.service_type, row.service_provider, row.segment_id
    )
    if referencing:
        combination = _describe(
            row.service_category, row.service_type, row.service_provider, row.segment_id
        )
        names = ", ".join(r["clientName"] for r in referencing)
        logger.warning(
            "Master data %s update blocked: %d referencing client service(s)",
            master_id,
            len(referencing),
        )
        raise ReferentialConflictError(
            "Cannot update master data: it is used by existing client services",
            details=(
                f"Service combination {combination} is referenced by "
                f"{len(referencing)} client service(s) for: {names}. "
                "Close or reassign those services before changing this entry."
            ),
            referencing_services=referencing,
        )

    duplicate = await find_combination(
        db, service_category, service_type, service_provider, segment_id
    )
    if duplicate is not None and duplicate.id != row.id:
        raise ConflictError(
            "This combination of category, type, and provider already exists",
            details=_describe(service_category, service_type, service_provider, segment_id),
        )

    row.service_category = service_category
    row.service_type = service_type
    row.service_provider = service_provider
    row.active = active
    row.segment_id = segment_id
    await db.flush()
    logger.info("Master data %s updated by user %s", master_id, ctx.user_id)
    return row
