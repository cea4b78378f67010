"""Shared test fixtures — in-process mock API, API client, signed-in auth store.

Every test gets a freshly seeded ``MemoryStore`` behind its own FastAPI app;
the ``ApiClient`` talks to it through ``httpx.ASGITransport`` so no server
or network is involved.
"""

from __future__ import annotations

import os

# Set test JWT_SECRET before any other import touches pydantic-settings
os.environ.setdefault("JWT_SECRET", "test-secret-for-ci-do-not-use-in-production")

from typing import AsyncGenerator

import httpx
import pytest
from fastapi import FastAPI

from school_erp.api.client import ApiClient
from school_erp.auth.schemas import LoginCredentials
from school_erp.auth.store import AuthStore
from school_erp.common.notifications import Notifier
from school_erp.config import settings
from school_erp.mock_api.main import create_app
from school_erp.mock_api.store import MemoryStore

BASE_URL = f"http://test{settings.API_PREFIX}"


# ── Mock backend ────────────────────────────────────────────────────


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture
def app(store: MemoryStore) -> FastAPI:
    return create_app(store)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[ApiClient, None]:
    async with ApiClient(BASE_URL, transport=httpx.ASGITransport(app=app)) as api:
        yield api


@pytest.fixture
async def http(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Raw HTTP client for asserting exact status codes and envelopes."""
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL) as ac:
        yield ac


# ── Auth ────────────────────────────────────────────────────────────


def admin_credentials() -> LoginCredentials:
    return LoginCredentials(email=settings.SMOKE_ADMIN_EMAIL, password=settings.SMOKE_ADMIN_PASSWORD)


@pytest.fixture
async def auth(client: ApiClient) -> AuthStore:
    """An auth store signed in as the seeded admin (nothing written to disk)."""
    store = AuthStore(client, persist=False)
    assert await store.login(admin_credentials())
    return store


@pytest.fixture
def auth_headers(auth: AuthStore) -> dict[str, str]:
    return {"Authorization": f"Bearer {auth.access_token}"}


@pytest.fixture
def notifier() -> Notifier:
    return Notifier()


# ── Factories ───────────────────────────────────────────────────────


def first_section(store: MemoryStore, index: int = 0) -> dict:
    return store["sections"].list()[index]


def students_in(store: MemoryStore, section_id: str) -> list[dict]:
    return store["students"].find(currentSectionId=section_id)
