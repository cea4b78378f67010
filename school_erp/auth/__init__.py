"""Auth module — login session store and auth endpoints."""

from school_erp.auth.schemas import LoginCredentials, User
from school_erp.auth.store import AuthStore

__all__ = ["AuthStore", "LoginCredentials", "User"]
