"""
Auth context — the per-request identity & data scope.

Built once per request from the verified JWT claims and passed
explicitly into every service call that touches segment-scoped data:

    ctx = Depends(get_auth_context)
    rows = await client_service.list_clients(db, ctx)

- Global admin (role=admin, no company): `visible_segment_ids` is None,
  meaning no row filter at all.
- Everyone else: `visible_segment_ids` is the (possibly empty) set of
  segment ids owned by their company, once resolved.  Never "all".
"""

from dataclasses import dataclass, replace

from sqlalchemy import ColumnElement, or_, true
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.security import TokenClaims
from caredata.models.user import UserRole


@dataclass(frozen=True)
class AuthContext:
    user_id: int
    username: str
    role: str
    company_id: int | None = None
    # Explicit, already-authorized segment from the request (if any)
    segment_id: int | None = None
    visible_segment_ids: frozenset[int] | None = None

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "AuthContext":
        return cls(
            user_id=claims.id,
            username=claims.username,
            role=claims.role,
            company_id=claims.company_id,
        )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def is_global_admin(self) -> bool:
        return self.is_admin and self.company_id is None

    def with_segment(self, segment_id: int | None) -> "AuthContext":
        return replace(self, segment_id=segment_id)

    def with_visible_segments(self, segment_ids: frozenset[int] | None) -> "AuthContext":
        return replace(self, visible_segment_ids=segment_ids)


async def resolve_company_segments(ctx: AuthContext, db: AsyncSession) -> AuthContext:
    """
    Attach the set of segment ids the caller may list.

    Global admins skip the lookup; company-less non-admins get an empty
    set (the guard denies them earlier anyway).
    """
    from caredata.services import directory_service

    if ctx.is_global_admin:
        return ctx.with_visible_segments(None)
    if ctx.company_id is None:
        return ctx.with_visible_segments(frozenset())

    segments = await directory_service.segments_of(ctx.company_id, db)
    return ctx.with_visible_segments(frozenset(s.segment_id for s in segments))


def segment_filter(column, ctx: AuthContext) -> ColumnElement[bool]:
    """
    WHERE clause restricting `column` (a nullable segment_id column) to
    what the caller may see.

    - Explicit segment on the request → exactly that segment.
    - Global admin → everything.
    - Otherwise → the company's segments plus unscoped (NULL) rows.
    """
    if ctx.segment_id is not None:
        return column == ctx.segment_id
    if ctx.is_global_admin:
        return true()
    visible = ctx.visible_segment_ids or frozenset()
    if not visible:
        return column.is_(None)
    return or_(column.in_(sorted(visible)), column.is_(None))
