"""
RBAC dependencies — the heart of request authorization.

Three layers, each a FastAPI dependency building on the previous one:

1. `get_auth_context`   — verify the JWT, build an `AuthContext`.
2. `guard_segment`      — run the segment guard on the request's
                          `segmentId` (query → body → path).
3. `scoped_context`     — guard + attach the caller's company segments
                          for list filtering.

`require_role` is a *dependency factory* layered on (1) for admin-only
routes.

Usage in a route:
    @router.get("/client-services")
    async def list_services(ctx: AuthContext = Depends(scoped_context), ...): ...

    @router.post("/companies")
    async def create_company(ctx: AuthContext = Depends(require_role("admin")), ...): ...
"""

import json
import logging

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.core.errors import AuthorizationError
from caredata.core.security import TokenClaims, get_current_claims
from caredata.rbac.context import AuthContext, resolve_company_segments
from caredata.rbac.segment_guard import authorize_segment, extract_segment_id

logger = logging.getLogger("rbac")

_BODY_METHODS = {"POST", "PUT", "PATCH"}


async def get_auth_context(
    claims: TokenClaims = Depends(get_current_claims),
) -> AuthContext:
    """Dependency that authenticates WITHOUT any segment checks."""
    return AuthContext.from_claims(claims)


class require_role:
    """
    Dependency factory.

    Can be used as:
        Depends(require_role("admin"))
    """

    def __init__(self, *roles: str):
        self.allowed_roles = set(roles)

    async def __call__(self, ctx: AuthContext = Depends(get_auth_context)) -> AuthContext:
        if ctx.role not in self.allowed_roles:
            logger.warning(
                "Role check failed for user %s — required one of %s, has %s",
                ctx.user_id,
                self.allowed_roles,
                ctx.role,
            )
            raise AuthorizationError("Forbidden: Admin access required")
        return ctx


async def _json_body(request: Request) -> object | None:
    if request.method not in _BODY_METHODS:
        return None
    if "application/json" not in request.headers.get("content-type", ""):
        return None
    raw = await request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        # Malformed JSON is reported by body validation, not here
        return None


async def guard_segment(
    request: Request,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """
    Run the segment guard and return the context with the authorized
    segment (if any) recorded on it.
    """
    form_or_body = await _json_body(request)
    if form_or_body is None and request.method in _BODY_METHODS and (
        "multipart/form-data" in request.headers.get("content-type", "")
    ):
        form_or_body = await request.form()

    segment_id = extract_segment_id(
        request.query_params,
        form_or_body,
        request.path_params,
    )
    await authorize_segment(ctx, segment_id, db)
    return ctx.with_segment(segment_id)


async def scoped_context(
    ctx: AuthContext = Depends(guard_segment),
    db: AsyncSession = Depends(get_db),
) -> AuthContext:
    """Guard + attach the caller's visible segment set."""
    return await resolve_company_segments(ctx, db)
