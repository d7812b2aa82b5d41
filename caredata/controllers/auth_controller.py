"""
Auth controller — login, token refresh, status & password change.

Login and refresh are PUBLIC (no auth dependency).  Refresh returns a
new access token only; the refresh token itself is not rotated.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.core.security import TokenClaims, get_current_claims
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import get_auth_context
from caredata.schemas import (
    AccessTokenResponse,
    AuthStatusResponse,
    ChangePasswordRequest,
    LoginRequest,
    MessageResponse,
    RefreshTokenRequest,
    TokenResponse,
)
from caredata.services import auth_service

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post("/auth/login", response_model=TokenResponse)
async def login(body: LoginRequest, db: AsyncSession = Depends(get_db)):
    """Authenticate with username + password → receive JWT pair."""
    return await auth_service.authenticate_user(body.username, body.password, db)


@router.post("/auth/refresh", response_model=AccessTokenResponse)
async def refresh_token(body: RefreshTokenRequest):
    return auth_service.refresh_access_token(body.refresh_token)


@router.get("/auth/status", response_model=AuthStatusResponse)
async def auth_status(claims: TokenClaims = Depends(get_current_claims)):
    return {"authenticated": True, "user": auth_service.claims_summary(claims)}


@router.post("/change-password", response_model=MessageResponse)
async def change_password(
    body: ChangePasswordRequest,
    ctx: AuthContext = Depends(get_auth_context),
    db: AsyncSession = Depends(get_db),
):
    await auth_service.change_password(
        ctx.user_id, body.current_password, body.new_password, db
    )
    return MessageResponse(message="Password changed successfully")
