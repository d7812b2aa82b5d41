"""
Authentication service.

Handles:
- Login (username + bcrypt password) → access + refresh token pair
- Refresh → new access token only (refresh tokens are not rotated)
- Password change for the authenticated user

Tokens are stateless; there is no server-side session registry.

All business logic lives here — controllers call service methods
and return the result.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.errors import AuthenticationError, NotFoundError, ValidationError
from caredata.core.security import (
    TokenClaims,
    TokenType,
    create_access_token,
    hash_password,
    issue_tokens,
    verify_password,
    verify_token,
)
from caredata.models.user import User

logger = logging.getLogger(__name__)


def _summary(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role.value,
        "company_id": user.company_id,
    }


# ── Login ────────────────────────────────────────────────────────────


async def authenticate_user(username: str, password: str, db: AsyncSession) -> dict:
    """Validate credentials and return access + refresh tokens."""
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar_one_or_none()

    if user is None or not verify_password(password, user.password_hash):
        logger.info("Failed login for username %r", username)
        raise AuthenticationError("Invalid username or password")

    tokens = issue_tokens(user)
    logger.info("User %s logged in", user.id)
    return {
        **tokens,
        "token_type": "bearer",
        "user": _summary(user),
    }


# ── Refresh ──────────────────────────────────────────────────────────


def refresh_access_token(refresh_token_raw: str) -> dict:
    """
    Exchange a refresh token for a new access token.

    The identity is copied from the refresh token's claims; no new
    refresh token is issued.
    """
    claims = verify_token(refresh_token_raw, TokenType.REFRESH)
    if claims is None:
        raise AuthenticationError()

    return {
        "access_token": create_access_token(claims),
        "token_type": "bearer",
    }


def claims_summary(claims: TokenClaims) -> dict:
    return {
        "id": claims.id,
        "username": claims.username,
        "role": claims.role,
        "company_id": claims.company_id,
    }


# ── Password ─────────────────────────────────────────────────────────


async def change_password(
    user_id: int,
    current_password: str,
    new_password: str,
    db: AsyncSession,
) -> None:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = hash_password(new_password)
    await db.flush()
    logger.info("User %s changed their password", user_id)
