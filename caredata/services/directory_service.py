"""
Company / segment directory.

Pure lookups (`segments_of`, `segment_by_id`) used by the segment guard
and the list filters, plus the admin CRUD around the two-level tenancy
hierarchy.

Rules enforced here:
- Only a global admin may create companies.
- A company-scoped admin can only read / manage their own company.
- A segment's owning company never changes; only the name is editable.
- There is no delete path for either entity.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import AuthorizationError, ConflictError, NotFoundError
from caredata.models.company import Company, Segment
from caredata.rbac.context import AuthContext
from caredata.rbac.segment_guard import authorize_segment

logger = logging.getLogger(__name__)


# ── Lookups ──────────────────────────────────────────────────────────


async def segments_of(company_id: int, db: AsyncSession) -> list[Segment]:
    stmt = (
        select(Segment)
        .where(Segment.company_id == company_id)
        .order_by(Segment.segment_id)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def segment_by_id(segment_id: int, db: AsyncSession) -> Segment | None:
    return await db.get(Segment, segment_id)


async def segments_for_user(ctx: AuthContext, db: AsyncSession) -> list[Segment]:
    """
    Segments for the caller's segment picker.

    Company-less callers (including global admins) get an empty list,
    never an error.
    """
    if ctx.company_id is None:
        return []
    return await segments_of(ctx.company_id, db)


# ── Companies ────────────────────────────────────────────────────────


def _ensure_company_access(ctx: AuthContext, company_id: int) -> None:
    if ctx.is_global_admin:
        return
    if ctx.company_id != company_id:
        raise AuthorizationError("Access denied: Company does not match your assignment")


async def get_company(company_id: int, db: AsyncSession, ctx: AuthContext) -> Company:
    _ensure_company_access(ctx, company_id)
    company = await db.get(Company, company_id)
    if company is None:
        raise NotFoundError("Company not found")
    return company


async def list_companies(
    db: AsyncSession,
    ctx: AuthContext,
    skip: int = 0,
    limit: int = 50,
) -> list[Company]:
    stmt = select(Company).order_by(Company.company_id)
    if not ctx.is_global_admin:
        stmt = stmt.where(Company.company_id == ctx.company_id)
    stmt = stmt.offset(skip).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def _company_name_taken(
    name: str, db: AsyncSession, exclude_id: int | None = None
) -> bool:
    stmt = select(Company.company_id).where(Company.company_name == name)
    if exclude_id is not None:
        stmt = stmt.where(Company.company_id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def create_company(
    db: AsyncSession,
    ctx: AuthContext,
    *,
    company_name: str,
    registered_address: str | None = None,
    postal_address: str | None = None,
    contact_person_name: str | None = None,
    contact_person_phone: str | None = None,
    contact_person_email: str | None = None,
) -> Company:
    """Create a tenant (global admin only)."""
    if not ctx.is_global_admin:
        raise AuthorizationError("Access denied: Only a global admin can create companies")

    if await _company_name_taken(company_name, db):
        raise ConflictError("A company with this name already exists")

    company = Company(
        company_name=company_name,
        registered_address=registered_address,
        postal_address=postal_address,
        contact_person_name=contact_person_name,
        contact_person_phone=contact_person_phone,
        contact_person_email=contact_person_email,
        created_by=ctx.user_id,
    )
    db.add(company)
    await db.flush()
    await db.refresh(company, ["segments"])
    logger.info("Company %s created by user %s", company.company_id, ctx.user_id)
    return company


async def update_company(
    company_id: int,
    db: AsyncSession,
    ctx: AuthContext,
    **fields: str | None,
) -> Company:
    company = await get_company(company_id, db, ctx)

    new_name = fields.pop("company_name", None)
    if new_name is not None and new_name != company.company_name:
        if await _company_name_taken(new_name, db, exclude_id=company_id):
            raise ConflictError("A company with this name already exists")
        company.company_name = new_name

    for attr, value in fields.items():
        if value is not None:
            setattr(company, attr, value)

    await db.flush()
    return company


# ── Segments ─────────────────────────────────────────────────────────


async def create_segment(
    company_id: int,
    segment_name: str,
    db: AsyncSession,
    ctx: AuthContext,
) -> Segment:
    await get_company(company_id, db, ctx)

    duplicate = await db.execute(
        select(Segment.segment_id).where(
            Segment.company_id == company_id,
            Segment.segment_name == segment_name,
        )
    )
    if duplicate.first() is not None:
        raise ConflictError("A segment with this name already exists for the company")

    segment = Segment(
        company_id=company_id,
        segment_name=segment_name,
        created_by=ctx.user_id,
    )
    db.add(segment)
    await db.flush()
    logger.info(
        "Segment %s created under company %s by user %s",
        segment.segment_id,
        company_id,
        ctx.user_id,
    )
    return segment


async def list_company_segments(
    company_id: int,
    db: AsyncSession,
    ctx: AuthContext,
) -> list[Segment]:
    await get_company(company_id, db, ctx)
    return await segments_of(company_id, db)


async def rename_segment(
    segment_id: int,
    segment_name: str,
    db: AsyncSession,
    ctx: AuthContext,
) -> Segment:
    """
    Rename a segment.

    Ownership is checked on the loaded segment, whatever `segmentId` the
    request carried; the owning company is left untouched.
    """
    segment = await segment_by_id(segment_id, db)
    if segment is None:
        raise NotFoundError("Segment not found")
    await authorize_segment(ctx.with_segment(None), segment.segment_id, db)

    if segment_name != segment.segment_name:
        duplicate = await db.execute(
            select(Segment.segment_id).where(
                Segment.company_id == segment.company_id,
                Segment.segment_name == segment_name,
                Segment.segment_id != segment_id,
            )
        )
        if duplicate.first() is not None:
            raise ConflictError("A segment with this name already exists for the company")
        segment.segment_name = segment_name

    await db.flush()
    return segment
