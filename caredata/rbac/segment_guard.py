"""
Segment guard — per-request segment authorization.

Decision sequence for every guarded request:

1. Global admin (role=admin, no company)            → ALLOW, unrestricted.
2. Caller has no company                             → 403.
3. Pick `segmentId` from query, then JSON body, then path params;
   the first one present wins.
4. No segment anywhere                               → ALLOW (unscoped;
   list endpoints narrow rows via the data filter instead).
5. Unknown segment                                   → 404.
   Segment owned by another company                  → 403.
   Otherwise                                         → ALLOW.

Every DENY raises; nothing is silently downgraded to partial results.
"""

import logging
from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import AuthorizationError, NotFoundError, ValidationError
from caredata.rbac.context import AuthContext

logger = logging.getLogger("rbac")

SEGMENT_KEYS = ("segmentId", "segment_id")

MSG_NO_COMPANY = "Access denied: User must be assigned to a company"
MSG_SEGMENT_NOT_FOUND = "Segment not found"
MSG_WRONG_COMPANY = "Access denied: Segment does not belong to your company"


def _first_present(source: Mapping[str, Any] | None) -> Any:
    if not source:
        return None
    for key in SEGMENT_KEYS:
        value = source.get(key)
        if value is not None and value != "":
            return value
    return None


def parse_segment_id(raw: Any) -> int | None:
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValidationError("Invalid segment ID format")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid segment ID format")


def extract_segment_id(
    query: Mapping[str, Any] | None,
    body: Any,
    path: Mapping[str, Any] | None,
) -> int | None:
    """Resolve the candidate segment id — query, then body, then path."""
    body_map = body if isinstance(body, Mapping) else None
    for source in (query, body_map, path):
        raw = _first_present(source)
        if raw is not None:
            return parse_segment_id(raw)
    return None


async def authorize_segment(
    ctx: AuthContext,
    segment_id: int | None,
    db: AsyncSession,
) -> None:
    """Raise unless `ctx` may act on `segment_id` (None = unscoped)."""
    from caredata.services import directory_service

    if ctx.is_global_admin:
        return

    if ctx.company_id is None:
        logger.warning("User %s denied: no company assignment", ctx.user_id)
        raise AuthorizationError(MSG_NO_COMPANY)

    if segment_id is None:
        return

    segment = await directory_service.segment_by_id(segment_id, db)
    if segment is None:
        logger.warning("User %s denied: segment %s not found", ctx.user_id, segment_id)
        raise NotFoundError(MSG_SEGMENT_NOT_FOUND)

    if segment.company_id != ctx.company_id:
        logger.warning(
            "User %s (company %s) denied access to segment %s owned by company %s",
            ctx.user_id,
            ctx.company_id,
            segment_id,
            segment.company_id,
        )
        raise AuthorizationError(MSG_WRONG_COMPANY)


async def authorize_row(ctx: AuthContext, row_segment_id: int | None, db: AsyncSession) -> None:
    """
    Re-apply the guard to a row fetched by id.

    Unscoped rows are visible to anyone with a company (or a global
    admin); scoped rows follow the segment rule.
    """
    await authorize_segment(ctx, row_segment_id, db)
    if ctx.segment_id is not None and row_segment_id not in (None, ctx.segment_id):
        raise AuthorizationError("Access denied: Record does not belong to the requested segment")
