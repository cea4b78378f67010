"""Auth router: login, register, refresh, logout, profile, change-password.

Routes:
    POST /auth/login            — Credentials → user + token pair
    POST /auth/register         — New account → user + token pair
    POST /auth/refresh-token    — Refresh token → new token pair
    POST /auth/logout           — Revoke the refresh token (bearer required)
    GET  /auth/profile          — Current user (bearer required)
    POST /auth/change-password  — Verify and replace password (bearer required)
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends

from school_erp.common.exceptions import ConflictError, UnauthorizedException
from school_erp.mock_api.crud import bad_request, ok, require_fields
from school_erp.mock_api.security import current_user, decode_token, issue_tokens, public_user
from school_erp.mock_api.store import MemoryStore, get_store

logger = logging.getLogger(__name__)

router = APIRouter()

MIN_PASSWORD_LENGTH = 8


@router.post("/login")
async def login(body: dict[str, Any] = Body(default_factory=dict), store: MemoryStore = Depends(get_store)):
    require_fields(body, "email", "password")
    user = store["users"].first(email=str(body["email"]).lower())
    if user is None or user.get("password") != body["password"]:
        logger.info("Failed login for %s", body["email"])
        raise UnauthorizedException("Invalid email or password")
    return ok(issue_tokens(user), "Login successful")


@router.post("/register", status_code=201)
async def register(body: dict[str, Any] = Body(default_factory=dict), store: MemoryStore = Depends(get_store)):
    require_fields(body, "email", "password", "firstName", "lastName")
    email = str(body["email"]).lower()
    if store["users"].first(email=email):
        raise ConflictError("Email already registered", "email")
    if len(body["password"]) < MIN_PASSWORD_LENGTH:
        raise bad_request(f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "password")
    user = store["users"].create({
        "email": email,
        "password": body["password"],
        "firstName": body["firstName"],
        "lastName": body["lastName"],
        "role": body.get("role") or "STUDENT",
        "schoolId": body.get("schoolId") or store.school_id,
    })
    return ok(issue_tokens(user), "Registration successful")


@router.post("/refresh-token")
async def refresh_token(body: dict[str, Any] = Body(default_factory=dict), store: MemoryStore = Depends(get_store)):
    require_fields(body, "refreshToken")
    token = body["refreshToken"]
    if token in store.revoked:
        raise UnauthorizedException("Refresh token has been revoked.")
    payload = decode_token(token, "refresh")
    user = store["users"].first(id=payload["sub"])
    if user is None:
        raise UnauthorizedException("User no longer exists.")
    store.revoked.add(token)
    return ok(issue_tokens(user))


@router.post("/logout")
async def logout(
    body: dict[str, Any] = Body(default_factory=dict),
    user: dict = Depends(current_user),
    store: MemoryStore = Depends(get_store),
):
    if body.get("refreshToken"):
        store.revoked.add(body["refreshToken"])
    return ok(None, "Logged out successfully")


@router.get("/profile")
async def profile(user: dict = Depends(current_user)):
    return ok(public_user(user))


@router.post("/change-password")
async def change_password(
    body: dict[str, Any] = Body(default_factory=dict),
    user: dict = Depends(current_user),
    store: MemoryStore = Depends(get_store),
):
    require_fields(body, "currentPassword", "newPassword")
    if user.get("password") != body["currentPassword"]:
        raise bad_request("Current password is incorrect", "currentPassword")
    if len(body["newPassword"]) < MIN_PASSWORD_LENGTH:
        raise bad_request(f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "newPassword")
    store["users"].update(user["id"], {"password": body["newPassword"]})
    return ok(None, "Password changed successfully")
