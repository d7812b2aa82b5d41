"""
Password hashing & JWT helpers.

- Passwords are hashed with bcrypt directly (passlib is unmaintained
  and broken with bcrypt>=4.1).
- JWTs are fully stateless: they carry id, username, role and
  company_id, plus a `type` claim (access | refresh) so one kind can
  never be used where the other is expected.
- Verification failures are collapsed into a single "invalid" outcome;
  the reason is logged server-side only.
"""

import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from caredata.core.config import settings
from caredata.core.errors import AuthenticationError

logger = logging.getLogger(__name__)

# ── Password hashing ────────────────────────────────────────────────


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


# ── JWT ──────────────────────────────────────────────────────────────
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


class TokenType(str, enum.Enum):
    ACCESS = "access"
    REFRESH = "refresh"


@dataclass(frozen=True)
class TokenClaims:
    id: int
    username: str
    role: str
    company_id: int | None
    type: TokenType
    iat: int | None = None
    exp: int | None = None


def _identity_claims(user: Any) -> dict[str, Any]:
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role.value if isinstance(user.role, enum.Enum) else user.role,
        "company_id": user.company_id,
    }


def _encode(data: dict[str, Any], token_type: TokenType, lifetime: timedelta) -> str:
    now = datetime.now(timezone.utc)
    to_encode = data.copy()
    to_encode.update(
        {
            "type": token_type.value,
            "iat": now,
            "exp": now + lifetime,
            "iss": settings.JWT_ISSUER,
            "aud": settings.JWT_AUDIENCE,
        }
    )
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_access_token(user: Any, expires_delta: timedelta | None = None) -> str:
    return _encode(
        _identity_claims(user),
        TokenType.ACCESS,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(user: Any, expires_delta: timedelta | None = None) -> str:
    """Long-lived token that can only be exchanged for a new access token."""
    return _encode(
        _identity_claims(user),
        TokenType.REFRESH,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def issue_tokens(user: Any) -> dict[str, str]:
    return {
        "access_token": create_access_token(user),
        "refresh_token": create_refresh_token(user),
    }


def verify_token(
    token: str,
    expected_type: TokenType = TokenType.ACCESS,
) -> TokenClaims | None:
    """
    Decode & validate a JWT.

    Returns None for a bad signature, issuer/audience mismatch, expiry,
    wrong `type` or a malformed payload.  Never raises.
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError as exc:
        logger.debug("JWT verification failed: %s", exc)
        return None

    if payload.get("type") != expected_type.value:
        logger.debug(
            "JWT type mismatch: expected %s, got %s", expected_type.value, payload.get("type")
        )
        return None

    try:
        return TokenClaims(
            id=int(payload["id"]),
            username=str(payload["username"]),
            role=str(payload["role"]),
            company_id=(
                int(payload["company_id"]) if payload.get("company_id") is not None else None
            ),
            type=TokenType(payload["type"]),
            iat=payload.get("iat"),
            exp=payload.get("exp"),
        )
    except (KeyError, TypeError, ValueError) as exc:
        logger.debug("JWT payload malformed: %s", exc)
        return None


# ── Per-request token extraction ────────────────────────────────────


async def get_current_claims(
    bearer_token: str | None = Depends(oauth2_scheme),
    query_token: str | None = Query(None, alias="token", include_in_schema=False),
) -> TokenClaims:
    """
    FastAPI dependency — authenticate the request.

    The token is taken from `Authorization: Bearer <token>` first; the
    `?token=` query parameter is accepted for direct document links
    opened outside programmatic fetches.
    """
    token = bearer_token or query_token
    if not token:
        raise AuthenticationError()

    claims = verify_token(token, TokenType.ACCESS)
    if claims is None:
        raise AuthenticationError()
    return claims
