from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from remote_auth.logging_config import configure_app_logging
from remote_auth.provider import get_provider
from remote_auth.routers import session
from remote_auth.settings import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        settings = get_settings()
        configure_app_logging(settings.log_level, settings.provider_log_level)
        logger.info("App startup beginning")

        # Build the process-wide provider (and its caches) once, before any request.
        get_provider()

        yield
        # Shutdown: eviction timers are daemon threads, nothing to clean up.

    app = FastAPI(lifespan=lifespan)
    app.include_router(session.router)
    return app


app = create_app()
