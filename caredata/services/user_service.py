"""
User service — administrative user management.

Invariant enforced on every write: a non-admin user must belong to a
company.  An admin without a company is a global admin.

Scope rules:
- Global admin: sees / manages every user.
- Company-scoped admin: only users of their own company, and can
  neither create global admins nor move users to another company.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from caredata.core.security import hash_password
from caredata.models.company import Company
from caredata.models.user import User, UserRole
from caredata.rbac.context import AuthContext

logger = logging.getLogger(__name__)

_UNSET = object()


async def _validate_assignment(
    role: UserRole,
    company_id: int | None,
    db: AsyncSession,
    ctx: AuthContext,
) -> None:
    if role != UserRole.ADMIN and company_id is None:
        raise ValidationError("A non-admin user must be assigned to a company")

    if company_id is not None and await db.get(Company, company_id) is None:
        raise NotFoundError("Company not found")

    if not ctx.is_global_admin and company_id != ctx.company_id:
        raise AuthorizationError("Access denied: Cannot assign users outside your company")


async def get_user_by_id(user_id: int, db: AsyncSession, ctx: AuthContext) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not ctx.is_global_admin and user.company_id != ctx.company_id:
        # Hide users of other tenants entirely
        raise NotFoundError("User not found")
    return user


async def list_users(
    db: AsyncSession,
    ctx: AuthContext,
    skip: int = 0,
    limit: int = 50,
) -> list[User]:
    stmt = select(User).order_by(User.id)
    if not ctx.is_global_admin:
        stmt = stmt.where(User.company_id == ctx.company_id)
    stmt = stmt.offset(skip).limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def create_user(
    db: AsyncSession,
    ctx: AuthContext,
    *,
    name: str,
    username: str,
    password: str,
    role: UserRole,
    company_id: int | None,
) -> User:
    await _validate_assignment(role, company_id, db, ctx)

    existing = await db.execute(select(User.id).where(User.username == username))
    if existing.first() is not None:
        raise ConflictError("Username already exists")

    user = User(
        name=name,
        username=username,
        password_hash=hash_password(password),
        role=role,
        company_id=company_id,
    )
    db.add(user)
    await db.flush()
    logger.info(
        "User %s (%s) created by %s with role=%s company=%s",
        user.id,
        username,
        ctx.user_id,
        role.value,
        company_id,
    )
    return user


async def update_user(
    user_id: int,
    db: AsyncSession,
    ctx: AuthContext,
    *,
    name: str | None = None,
    role: UserRole | None = None,
    company_id: int | None | object = _UNSET,
) -> User:
    """
    Change a user's name, role and/or company.

    `company_id` uses a sentinel so an explicit None (detach from any
    company) differs from "not provided".
    """
    user = await get_user_by_id(user_id, db, ctx)

    new_role = role if role is not None else user.role
    new_company = user.company_id if company_id is _UNSET else company_id
    await _validate_assignment(new_role, new_company, db, ctx)

    if name is not None:
        user.name = name
    user.role = new_role
    user.company_id = new_company
    await db.flush()
    logger.info(
        "User %s updated by %s: role=%s company=%s",
        user.id,
        ctx.user_id,
        new_role.value,
        new_company,
    )
    return user
