"""School ERP mock backend — FastAPI application factory.

An in-memory rendition of the REST API the console talks to, used by the
test-suite and for running the smoke suites locally:

    uvicorn school_erp.mock_api.main:app --port 5000
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from school_erp import __version__
from school_erp.common.exceptions import register_exception_handlers
from school_erp.config import settings
from school_erp.mock_api.routes import (
    academics,
    assessments,
    attendance,
    auth,
    finance,
    hr,
    library,
    mess,
    reports,
    transportation,
)
from school_erp.mock_api.security import optional_user
from school_erp.mock_api.store import MemoryStore

logger = logging.getLogger(__name__)


def create_app(store: Optional[MemoryStore] = None) -> FastAPI:
    """Create and configure the mock API around *store* (a seeded one by default)."""
    app = FastAPI(
        title="School ERP (mock)",
        description="In-memory School ERP backend for tests and smoke runs",
        version=__version__,
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url=None,
    )
    app.state.store = store if store is not None else MemoryStore()

    # Exception handlers (RFC 7807 + success/error envelope)
    register_exception_handlers(app)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    prefix = settings.API_PREFIX

    # Health check (no auth)
    @app.get(f"{prefix}/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": __version__,
            "environment": settings.ENVIRONMENT,
            "schoolId": app.state.store.school_id,
        }

    # Auth routes decode tokens themselves; everything else reads the
    # caller from an optional bearer token.
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])

    caller = [Depends(optional_user)]
    routers = [
        (academics.branches_router, "/branches", "academics"),
        (academics.classes_router, "/classes", "academics"),
        (academics.students_router, "/students", "academics"),
        (academics.transfers_router, "/transfers", "academics"),
        (transportation.drivers_router, "/transportation/drivers", "transportation"),
        (transportation.vehicles_router, "/transportation/vehicles", "transportation"),
        (transportation.routes_router, "/transportation/routes", "transportation"),
        (transportation.trips_router, "/transportation/trips", "transportation"),
        (hr.router, "/hr", "hr"),
        (mess.router, "/mess", "mess"),
        (attendance.router, "/attendance", "attendance"),
        (reports.router, "/reports", "reports"),
        (library.router, "/books", "library"),
        (assessments.router, "/tests/upload", "assessments"),
        (finance.fees_router, "/fees", "finance"),
        (finance.invoices_router, "/invoices", "finance"),
    ]
    for router, path, tag in routers:
        app.include_router(router, prefix=f"{prefix}{path}", tags=[tag], dependencies=caller)

    logger.info("Mock API ready under %s (%d collections)", prefix, len(app.state.store.collections))
    return app


logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = create_app()
