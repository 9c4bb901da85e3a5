"""
payroll_tracking.api.routers.dev_auth

Dev-only token minting so the workflow can be exercised without an identity
provider. Disabled (404) when `env == "prod"`.
"""

from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.status import HTTP_404_NOT_FOUND

from payroll_tracking.api.deps import settings_dep
from payroll_tracking.auth.jwt import JwtConfig, issue_token
from payroll_tracking.auth.models import SystemRole
from payroll_tracking.settings import Settings

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    # Employee id the token acts as.
    subject: str = Field(min_length=1, max_length=64)
    roles: list[SystemRole] = Field(default_factory=lambda: [SystemRole.employee])
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60)


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail="Not found")

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        subject=body.subject,
        roles=[str(r) for r in body.roles],
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token)
