"""
payroll_tracking.api.routers.health

Liveness (`/healthz`) and readiness (`/readyz`, runs a trivial query) checks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from payroll_tracking import __version__
from payroll_tracking.api.deps import db_session, settings_dep
from payroll_tracking.settings import Settings

router = APIRouter()


@router.get("/healthz")
async def healthz(settings: Settings = Depends(settings_dep)) -> dict[str, str]:
    return {"status": "ok", "service": settings.service_name, "version": __version__}


@router.get("/readyz")
async def readyz(session: AsyncSession = Depends(db_session)) -> dict[str, str]:
    await session.execute(text("SELECT 1"))
    return {"status": "ready", "database": session.get_bind().dialect.name}
