"""Bearer-token handling for the mock API: JWT issue / decode and user dependencies."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt

from school_erp.common.exceptions import UnauthorizedException
from school_erp.config import settings
from school_erp.mock_api.store import MemoryStore, get_store, new_id

REFRESH_EXPIRY_DAYS = 7


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    """The user as returned on the wire (no password)."""
    return {k: v for k, v in user.items() if k != "password"}


def create_token(user: dict[str, Any], token_type: str = "access") -> str:
    now = datetime.now(timezone.utc)
    if token_type == "access":
        expires = now + timedelta(hours=settings.JWT_EXPIRY_HOURS)
    else:
        expires = now + timedelta(days=REFRESH_EXPIRY_DAYS)
    claims = {
        "sub": user["id"],
        "email": user["email"],
        "role": user.get("role"),
        "schoolId": user.get("schoolId"),
        "type": token_type,
        "iat": int(now.timestamp()),
        "exp": int(expires.timestamp()),
        "jti": new_id(),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def issue_tokens(user: dict[str, Any]) -> dict[str, Any]:
    return {
        "user": public_user(user),
        "accessToken": create_token(user, "access"),
        "refreshToken": create_token(user, "refresh"),
    }


def decode_token(token: str, expected_type: str = "access") -> dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise UnauthorizedException("Token has expired.")
    except JWTError:
        raise UnauthorizedException("Invalid token.")
    if payload.get("type") != expected_type:
        raise UnauthorizedException("Invalid token type.")
    return payload


def _bearer(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization")
    if not header:
        return None
    if not header.startswith("Bearer "):
        raise UnauthorizedException("Missing or invalid Authorization header.")
    return header[7:]


# ── Dependencies ────────────────────────────────────────────────────

async def optional_user(
    request: Request,
    store: MemoryStore = Depends(get_store),
) -> Optional[dict[str, Any]]:
    """The caller, when a bearer token is sent; a bad token is still a 401."""
    token = _bearer(request)
    if token is None:
        return None
    payload = decode_token(token)
    user = store["users"].first(id=payload["sub"])
    if user is None:
        raise UnauthorizedException("User no longer exists.")
    request.state.user = user
    return user


async def current_user(user: Optional[dict[str, Any]] = Depends(optional_user)) -> dict[str, Any]:
    if user is None:
        raise UnauthorizedException()
    return user
