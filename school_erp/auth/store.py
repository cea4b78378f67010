"""Session state shared by every page: current user and bearer tokens.

The store is passed explicitly to each service; it is never a module-level
singleton. The user, both tokens and the authenticated flag persist to a JSON
file so a restarted console keeps its session.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from jose import JWTError, jwt

from school_erp.api.client import ApiClient
from school_erp.auth.schemas import LoginCredentials, RegisterData, User
from school_erp.auth.service import AuthApi
from school_erp.config import settings

logger = logging.getLogger(__name__)

PERSISTED_FIELDS = ("user", "accessToken", "refreshToken", "isAuthenticated")


class AuthStore:
    """Holds ``user, access_token, refresh_token, is_authenticated,
    is_loading, error`` and the actions that change them."""

    def __init__(
        self,
        client: ApiClient,
        *,
        storage_path: Optional[Path | str] = None,
        persist: bool = True,
    ) -> None:
        self.api = AuthApi(client)
        self.storage_path = Path(storage_path or settings.AUTH_STORE_PATH) if persist else None

        self.user: Optional[User] = None
        self.access_token: Optional[str] = None
        self.refresh_token: Optional[str] = None
        self.is_authenticated = False
        self.is_loading = False
        self.error: Optional[str] = None

        self._restore()

    # ── Persistence ─────────────────────────────────────────────────

    def _snapshot(self) -> dict[str, Any]:
        return {
            "user": self.user.model_dump(by_alias=True) if self.user else None,
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "isAuthenticated": self.is_authenticated,
        }

    def _persist(self) -> None:
        if self.storage_path is None:
            return
        self.storage_path.write_text(json.dumps(self._snapshot(), indent=2), encoding="utf-8")

    def _restore(self) -> None:
        if self.storage_path is None or not self.storage_path.exists():
            return
        try:
            state = json.loads(self.storage_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable auth state %s: %s", self.storage_path, exc)
            return
        state = {k: state.get(k) for k in PERSISTED_FIELDS}
        self.user = User.model_validate(state["user"]) if state["user"] else None
        self.access_token = state["accessToken"]
        self.refresh_token = state["refreshToken"]
        self.is_authenticated = bool(state["isAuthenticated"])

    def _clear_session(self) -> None:
        self.user = None
        self.access_token = None
        self.refresh_token = None
        self.is_authenticated = False

    # ── Actions ─────────────────────────────────────────────────────

    async def login(self, credentials: LoginCredentials) -> bool:
        self.is_loading = True
        self.error = None
        result = await self.api.login(credentials)
        self.is_loading = False

        if result.success and result.data:
            self.user = User.from_login_payload(result.data.user)
            self.access_token = result.data.access_token
            self.refresh_token = result.data.refresh_token
            self.is_authenticated = True
            self._persist()
            logger.info("Signed in as %s (%s)", self.user.email, self.user.role)
            return True

        self.error = result.error or "Login failed"
        return False

    async def register(self, data: RegisterData) -> bool:
        self.is_loading = True
        self.error = None
        result = await self.api.register(data)
        self.is_loading = False

        if result.success and result.data:
            self.user = User.from_login_payload(result.data.user)
            self.access_token = result.data.access_token
            self.refresh_token = result.data.refresh_token
            self.is_authenticated = True
            self._persist()
            return True

        self.error = result.error or "Registration failed"
        return False

    async def logout(self) -> None:
        if self.access_token:
            await self.api.logout(self.access_token)
        self._clear_session()
        self.error = None
        self._persist()

    async def refresh_access_token(self) -> bool:
        if not self.refresh_token or not self.access_token:
            return False

        result = await self.api.refresh_token(self.refresh_token, self.access_token)
        if result.success and result.data:
            self.access_token = result.data.access_token
            self.refresh_token = result.data.refresh_token
            self._persist()
            return True

        logger.warning("Token refresh failed; signing out")
        self._clear_session()
        self._persist()
        return False

    def clear_error(self) -> None:
        self.error = None

    def set_user(self, user: User) -> None:
        self.user = user
        self._persist()

    # ── Token introspection ─────────────────────────────────────────

    @property
    def token_expires_at(self) -> Optional[datetime]:
        """``exp`` claim of the access token, read without verifying it."""
        if not self.access_token:
            return None
        try:
            claims = jwt.get_unverified_claims(self.access_token)
        except JWTError:
            return None
        exp = claims.get("exp")
        return datetime.fromtimestamp(exp, tz=timezone.utc) if exp else None

    @property
    def is_token_expired(self) -> bool:
        expires_at = self.token_expires_at
        return expires_at is not None and expires_at <= datetime.now(timezone.utc)
