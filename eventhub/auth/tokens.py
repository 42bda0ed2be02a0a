from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from jwt import ExpiredSignatureError, PyJWTError

from eventhub.core.config import settings
from eventhub.models.user import UserRole


class TokenExpired(ValueError):
    pass


class TokenInvalid(ValueError):
    pass


@dataclass(frozen=True)
class Principal:
    """Caller identity as asserted by a verified access token."""

    user_id: uuid.UUID
    email: str
    role: UserRole


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(
    user_id: uuid.UUID,
    email: str,
    role: UserRole,
    ttl_seconds: int | None = None,
) -> str:
    now = _now()
    ttl = settings.access_token_ttl_seconds if ttl_seconds is None else ttl_seconds
    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role.value,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=ttl)).timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Principal:
    try:
        claims = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp", "iat"]},
        )
    except ExpiredSignatureError as exc:
        raise TokenExpired("token expired") from exc
    except PyJWTError as exc:
        raise TokenInvalid("invalid access token") from exc

    try:
        return Principal(
            user_id=uuid.UUID(claims["sub"]),
            email=str(claims.get("email", "")),
            role=UserRole(claims.get("role")),
        )
    except (KeyError, ValueError) as exc:
        raise TokenInvalid("malformed token claims") from exc
