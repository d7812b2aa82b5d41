"""
Admin controller — user management.

Every route uses `Depends(require_role("admin"))` for enforcement.
Controllers are THIN — they delegate to services and return schemas.

A company-scoped admin only sees and manages users of their own
company; the service layer enforces that with the AuthContext.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import require_role
from caredata.schemas import CreateUserRequest, UpdateUserRequest, UserOut
from caredata.services import user_service

router = APIRouter(prefix="/api/users", tags=["Admin"])

require_admin = require_role("admin")


@router.get("", response_model=list[UserOut])
async def list_users(
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
):
    users = await user_service.list_users(db, ctx, skip, limit)
    return [UserOut.model_validate(u) for u in users]


@router.post("", response_model=UserOut, status_code=201)
async def create_user(
    body: CreateUserRequest,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.create_user(
        db,
        ctx,
        name=body.name,
        username=body.username,
        password=body.password,
        role=body.role,
        company_id=body.company_id,
    )
    return UserOut.model_validate(user)


@router.patch("/{user_id}", response_model=UserOut)
async def update_user(
    user_id: int,
    body: UpdateUserRequest,
    ctx: AuthContext = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Change a user's name, role or company (explicit null detaches)."""
    changes = {}
    if "company_id" in body.model_fields_set:
        changes["company_id"] = body.company_id
    user = await user_service.update_user(
        user_id,
        db,
        ctx,
        name=body.name,
        role=body.role,
        **changes,
    )
    return UserOut.model_validate(user)
