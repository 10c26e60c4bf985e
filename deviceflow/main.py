"""
FastAPI application entrypoint for the device flow credential service.
"""

from __future__ import annotations

from typing import Optional

import httpx
from fastapi import FastAPI

from deviceflow.api.routes import router as api_router
from deviceflow.core.config import AppSettings, get_settings
from deviceflow.core.logging import configure_logging
from deviceflow.dependencies import build_auth_context


def create_app(
    settings: Optional[AppSettings] = None,
    *,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """Factory for the FastAPI application."""
    settings = settings or get_settings()
    configure_logging(settings.log_level, settings.resolved_log_file())

    app = FastAPI(
        title="Device Flow Credential Service",
        version="0.1.0",
        description="OAuth device authorization, token storage and refresh for the host app.",
    )
    app.state.auth = build_auth_context(settings, transport=transport)
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]
