"""
payroll_tracking.api.__main__

`python -m payroll_tracking.api` / `payroll-tracking-api`: serve the API with
uvicorn using `PT_*` settings.
"""

from __future__ import annotations

import uvicorn

from payroll_tracking.api.app import create_app
from payroll_tracking.settings import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=settings.api_host,
        port=settings.api_port,
        # Logging is configured by create_app; uvicorn must not install its own handlers.
        log_config=None,
        access_log=False,
    )


if __name__ == "__main__":
    main()
