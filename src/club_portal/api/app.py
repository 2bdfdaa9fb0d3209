"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from club_portal.api.admin import router as admin_router
from club_portal.api.appointments import router as appointments_router
from club_portal.api.auth import router as auth_router
from club_portal.api.groups import router as groups_router
from club_portal.api.sessions import router as sessions_router
from club_portal.app_logging import configure_logging
from club_portal.containers import AppContainer
from club_portal.domain.errors import DatabaseError, DatabaseTimeoutError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Starting (environment=%s)", container.settings.environment)
        yield
        app.state.container.cache.clear()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(auth_router)
    app.include_router(groups_router)
    app.include_router(sessions_router)
    app.include_router(appointments_router)

    @app.exception_handler(DatabaseTimeoutError)
    async def database_timeout(
        request: Request, exc: DatabaseTimeoutError
    ) -> JSONResponse:
        logger.error("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            content={"detail": "The database did not respond in time."},
        )

    @app.exception_handler(DatabaseError)
    async def database_error(request: Request, exc: DatabaseError) -> JSONResponse:
        logger.error("%s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
