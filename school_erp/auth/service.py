"""Auth endpoints: login, register, token refresh, logout, profile."""

from __future__ import annotations

from typing import Optional

from school_erp.api.client import ApiClient
from school_erp.api.envelope import ApiResponse
from school_erp.auth.schemas import (
    AuthResponse,
    ChangePasswordRequest,
    LoginCredentials,
    RegisterData,
    TokenPair,
)


class AuthApi:
    """Thin wrapper over ``/auth/*``; the token is always passed in."""

    endpoint = "/auth"

    def __init__(self, client: ApiClient) -> None:
        self.client = client

    async def login(self, credentials: LoginCredentials) -> ApiResponse:
        response = await self.client.post(f"{self.endpoint}/login", credentials.to_payload())
        return response.map(AuthResponse.model_validate)

    async def register(self, data: RegisterData) -> ApiResponse:
        response = await self.client.post(f"{self.endpoint}/register", data.to_payload())
        return response.map(AuthResponse.model_validate)

    async def refresh_token(self, refresh_token: str, token: str) -> ApiResponse:
        response = await self.client.post(
            f"{self.endpoint}/refresh-token",
            {"refreshToken": refresh_token},
            token,
        )
        return response.map(TokenPair.model_validate)

    async def logout(self, token: str) -> ApiResponse:
        return await self.client.post(f"{self.endpoint}/logout", {}, token)

    async def get_profile(self, token: str) -> ApiResponse:
        return await self.client.get(f"{self.endpoint}/profile", token)

    async def change_password(self, data: ChangePasswordRequest, token: Optional[str]) -> ApiResponse:
        return await self.client.post(f"{self.endpoint}/change-password", data.to_payload(), token)
