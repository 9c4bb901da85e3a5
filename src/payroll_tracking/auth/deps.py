"""
payroll_tracking.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Enforce RBAC via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from payroll_tracking.api.deps import settings_dep
from payroll_tracking.auth.jwt import JwtConfig, JwtValidationError, decode_claims
from payroll_tracking.auth.models import Principal
from payroll_tracking.observability.logging import bind_actor
from payroll_tracking.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    try:
        claims = decode_claims(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise HTTPException(status_code=HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}") from e

    bind_actor(actor=claims.subject, roles=claims.roles)
    return Principal(subject=claims.subject, roles=claims.roles)


def require_roles(*required: str):
    """
    The caller must hold at least one of `required` (admin always passes).
    """
    required_set = frozenset(required)

    def _dep(principal: Principal = Depends(get_principal)) -> Principal:
        if not principal.has_any(required_set):
            raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return _dep


# --- Module Notes -----------------------------------------------------------
# Role checks are any-of. Staff holding several roles pass every stage they hold.
