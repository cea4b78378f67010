"""Auth Pydantic schemas for request / response validation."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import EmailStr

from school_erp.common.schemas import ApiModel


# ── Requests ────────────────────────────────────────────────────────

class LoginCredentials(ApiModel):
    email: EmailStr
    password: str


class RegisterData(ApiModel):
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    role: str = "STUDENT"
    school_id: Optional[str] = None


class ChangePasswordRequest(ApiModel):
    current_password: str
    new_password: str


# ── Embedded / Shared ──────────────────────────────────────────────

class User(ApiModel):
    """The signed-in user as kept by the auth store."""

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    role: str
    profile_picture: Optional[str] = None
    school_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @classmethod
    def from_login_payload(cls, data: dict[str, Any]) -> "User":
        """Flatten a login ``user`` payload.

        Names may sit on the user itself or on its nested ``profile``,
        ``admin``, ``teacher`` or ``student`` record; the first non-empty one
        wins.
        """
        nested = [data] + [data.get(key) or {} for key in ("profile", "admin", "teacher", "student")]

        def first(field: str) -> str:
            for source in nested:
                if source.get(field):
                    return source[field]
            return ""

        profile = data.get("profile") or {}
        return cls(
            id=data["id"],
            email=data["email"],
            role=data.get("role", ""),
            first_name=first("firstName"),
            last_name=first("lastName"),
            profile_picture=data.get("profilePicture") or profile.get("profileImage"),
            school_id=data.get("schoolId"),
        )


# ── Responses ───────────────────────────────────────────────────────

class AuthResponse(ApiModel):
    user: dict[str, Any]
    access_token: str
    refresh_token: Optional[str] = None


class TokenPair(ApiModel):
    access_token: str
    refresh_token: Optional[str] = None
