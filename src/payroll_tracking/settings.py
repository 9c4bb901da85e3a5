"""
payroll_tracking.settings

Central configuration model (Pydantic Settings).

Responsibilities:
- Provide strongly-typed, env-driven settings for all layers.
- Hide secrets from repr/logging (e.g., JWT secret).
- Offer a cached settings instance for dependency injection.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Env-driven configuration (prefix `PT_`), with defaults safe for local dev.
    """

    model_config = SettingsConfigDict(env_prefix="PT_", case_sensitive=False)

    # Environment controls toggle behavior like auto-init DB tables and dev tokens.
    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "payroll-tracking"
    log_level: str = "INFO"

    api_host: str = "0.0.0.0"
    api_port: int = 8080

    # Auth
    jwt_alg: str = "HS256"
    jwt_issuer: str = "payroll-tracking"
    jwt_audience: str = "payroll-api"
    jwt_secret: str = Field(default="dev-secret-change-me", repr=False)

    # Persistence
    database_url: str = "sqlite+aiosqlite:///./payroll_tracking.db"

    # Business identifiers: CLAIM-0001, DISP-0001
    claim_id_prefix: str = "CLAIM-"
    dispute_id_prefix: str = "DISP-"
    business_id_width: int = Field(default=4, ge=1, le=12)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


# --- Module Notes -----------------------------------------------------------
# The app factory stores the Settings instance it was built with on app.state;
# request dependencies read it from there (see `api.deps.settings_dep`).
