"""Async HTTP client for the School ERP backend.

Every call resolves to an ``ApiResponse`` envelope: HTTP errors, transport
failures and undecodable bodies all come back as ``success=False`` with a
human-readable ``error``. Nothing is retried.
"""

from __future__ import annotations

import logging
import secrets
from pathlib import Path
from typing import Any, Optional

import httpx

from school_erp.api.envelope import ApiResponse
from school_erp.common.constants import DEFAULT_ERROR_MESSAGE, NETWORK_ERROR_MESSAGE
from school_erp.config import settings

logger = logging.getLogger(__name__)


def build_query_params(params: Optional[dict[str, Any]]) -> dict[str, str]:
    """Drop ``None`` / empty-string values and stringify the rest."""
    if not params:
        return {}
    cleaned: dict[str, str] = {}
    for key, value in params.items():
        if value is None or value == "":
            continue
        if isinstance(value, bool):
            cleaned[key] = "true" if value else "false"
        else:
            cleaned[key] = str(getattr(value, "value", value))
    return cleaned


def encode_multipart(
    fields: dict[str, str],
    files: dict[str, tuple[str, bytes, str]],
    boundary: Optional[str] = None,
) -> tuple[bytes, str]:
    """
    Build a ``multipart/form-data`` body.

    Returns ``(body, content_type)``; the boundary is random unless given.
    """
    boundary = boundary or f"----SchoolErpFormBoundary{secrets.token_hex(8)}"
    parts: list[bytes] = []
    for name, value in fields.items():
        parts.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"\r\n\r\n'
            f"{value}\r\n".encode()
        )
    for name, (filename, content, content_type) in files.items():
        parts.append(
            f"--{boundary}\r\n"
            f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
            f"Content-Type: {content_type}\r\n\r\n".encode()
            + content
            + b"\r\n"
        )
    parts.append(f"--{boundary}--\r\n".encode())
    return b"".join(parts), f"multipart/form-data; boundary={boundary}"


class ApiClient:
    """Thin envelope-normalising wrapper around ``httpx.AsyncClient``."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        school_id: Optional[str] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.school_id = settings.SCHOOL_ID if school_id is None else school_id
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    # ── Core request ────────────────────────────────────────────────

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        token: Optional[str] = None,
        params: Optional[dict[str, Any]] = None,
        json: Any = None,
        content: Optional[bytes] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> ApiResponse:
        request_headers: dict[str, str] = {}
        if content is None:
            request_headers["Content-Type"] = "application/json"
        if token:
            request_headers["Authorization"] = f"Bearer {token}"
        if self.school_id:
            request_headers["X-School-Id"] = self.school_id
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(
                method,
                endpoint,
                params=build_query_params(params),
                json=json,
                content=content,
                headers=request_headers,
            )
            body = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("%s %s failed: %s", method, endpoint, exc)
            return ApiResponse.fail(str(exc) or NETWORK_ERROR_MESSAGE)

        return self._normalize(response.status_code, body)

    @staticmethod
    def _normalize(status_code: int, body: Any) -> ApiResponse:
        if not 200 <= status_code < 300:
            error = DEFAULT_ERROR_MESSAGE
            if isinstance(body, dict):
                error = body.get("message") or body.get("error") or DEFAULT_ERROR_MESSAGE
            return ApiResponse.fail(error, status_code)

        if isinstance(body, dict):
            data = body.get("data") if body.get("data") is not None else body
            return ApiResponse.ok(data, body.get("message"), status_code)
        return ApiResponse.ok(body, status_code=status_code)

    # ── Verb helpers ────────────────────────────────────────────────

    async def get(self, endpoint: str, token: Optional[str] = None, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return await self.request("GET", endpoint, token=token, params=params)

    async def post(self, endpoint: str, body: Any = None, token: Optional[str] = None, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return await self.request("POST", endpoint, token=token, params=params, json=body if body is not None else {})

    async def put(self, endpoint: str, body: Any = None, token: Optional[str] = None, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return await self.request("PUT", endpoint, token=token, params=params, json=body if body is not None else {})

    async def patch(self, endpoint: str, body: Any = None, token: Optional[str] = None, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return await self.request("PATCH", endpoint, token=token, params=params, json=body if body is not None else {})

    async def delete(self, endpoint: str, token: Optional[str] = None, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return await self.request("DELETE", endpoint, token=token, params=params)

    async def upload(
        self,
        endpoint: str,
        file_path: Path,
        *,
        token: Optional[str] = None,
        fields: Optional[dict[str, str]] = None,
        content_type: str = "application/octet-stream",
        field_name: str = "file",
    ) -> ApiResponse:
        """POST *file_path* as a multipart form together with extra *fields*."""
        path = Path(file_path)
        try:
            payload = path.read_bytes()
        except OSError as exc:
            logger.error("Cannot read upload %s: %s", path, exc)
            return ApiResponse.fail(str(exc))
        body, multipart_type = encode_multipart(
            fields or {},
            {field_name: (path.name, payload, content_type)},
        )
        return await self.request(
            "POST",
            endpoint,
            token=token,
            content=body,
            headers={"Content-Type": multipart_type},
        )
