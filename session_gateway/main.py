"""
FastAPI application entrypoint for the session gateway.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from session_gateway.api import register_exception_handlers
from session_gateway.api import router as api_router
from session_gateway.core.config import AppSettings, get_settings
from session_gateway.core.logging import configure_logging

logger = logging.getLogger(__name__)


def _lifespan(settings: AppSettings):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Starting session gateway (env=%s, store=%s, session_ttl=%ss)",
            settings.environment,
            settings.store.backend,
            settings.session.ttl_seconds,
        )
        if settings.store.backend == "memory":
            logger.warning("Sessions are held in process memory and vanish on restart")
        if not settings.security.token_encryption_secret:
            logger.warning("TOKEN_ENCRYPTION_SECRET unset; provider tokens are stored in clear")
        yield

    return lifespan


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="GitHub Session Gateway",
        version="0.1.0",
        description="GitHub OAuth login backed by server-side sessions.",
        lifespan=_lifespan(settings),
    )
    register_exception_handlers(app)
    app.include_router(api_router)
    return app


app = create_app()

__all__ = ["app", "create_app"]
