"""
payroll_tracking.api.app

FastAPI app factory for the Payroll Tracking service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/error handlers.
- Initialize and dispose shared infrastructure (DB engine/session factory).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from payroll_tracking import __version__
from payroll_tracking.api.errors import register_error_handlers
from payroll_tracking.api.routers.claims import router as claims_router
from payroll_tracking.api.routers.dev_auth import router as dev_auth_router
from payroll_tracking.api.routers.disputes import router as disputes_router
from payroll_tracking.api.routers.health import router as health_router
from payroll_tracking.api.routers.internal.router import router as internal_router
from payroll_tracking.api.routers.notifications import router as notifications_router
from payroll_tracking.api.routers.payslips import router as payslips_router
from payroll_tracking.api.routers.refunds import router as refunds_router
from payroll_tracking.api.routers.reports import router as reports_router
from payroll_tracking.db.init_db import init_db
from payroll_tracking.db.session import create_engine, create_sessionmaker
from payroll_tracking.observability.logging import configure_logging, get_logger
from payroll_tracking.observability.middleware import RequestContextMiddleware
from payroll_tracking.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(
        service_name=settings.service_name, level=settings.log_level, env=settings.env
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod schema is managed by Alembic migrations.
            await init_db(engine)
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Payroll Tracking Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(internal_router)
    app.include_router(claims_router)
    app.include_router(disputes_router)
    app.include_router(refunds_router)
    app.include_router(payslips_router)
    app.include_router(reports_router)
    app.include_router(notifications_router)

    return app


# --- Module Notes -----------------------------------------------------------
# App composition stays here; business rules live in `workflow` and `services`.
