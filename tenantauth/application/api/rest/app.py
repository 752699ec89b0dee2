import logging
from contextlib import asynccontextmanager

import logfire
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tenantauth.application.api.rest.routes import health
from tenantauth.application.api.v1.errors import map_error
from tenantauth.application.api.v1.routes import user_role
from tenantauth.application.di import create_container
from tenantauth.config import Config, configure_logging
from tenantauth.domain.shared.authorization.startup import validate_all_handlers
from tenantauth.domain.shared.error import TenantAuthError
from tenantauth.domain.user_role.model.catalog import PermissionCatalog
from tenantauth.infrastructure.persistence.migrate import run_migrations
from tenantauth.util.di.fastapi import setup_dishka

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await app.state.dishka_container.close()


def create_app(config: Config | None = None) -> FastAPI:
    """Create FastAPI application."""
    # Pydantic Settings populates from env vars at runtime
    config = config or Config()  # type: ignore[call-arg]

    # Configure logging early
    configure_logging(config.logging)
    logger.info("Starting %s v%s", config.server.name, config.server.version)

    # Fail fast on handlers without an authorization gate and on a broken catalog
    validate_all_handlers()
    catalog = PermissionCatalog.default()

    if config.database.auto_migrate:
        run_migrations(config.database.url)

    app_instance = FastAPI(
        title=config.server.name,
        description=config.server.description,
        version=config.server.version,
        lifespan=lifespan,
    )

    # Instrument FastAPI for automatic tracing of HTTP requests
    logfire.instrument_fastapi(app_instance)

    # Setup dependency injection
    container = create_container(config, catalog)
    setup_dishka(container, app_instance)

    app_instance.include_router(health.router)
    app_instance.include_router(user_role.router, prefix="/api/v1")

    # Global error handler - maps domain and infrastructure errors to HTTP responses
    @app_instance.exception_handler(TenantAuthError)
    async def tenantauth_error_handler(request: Request, exc: TenantAuthError):
        http_exc = map_error(exc)
        if http_exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc)
        return JSONResponse(
            status_code=http_exc.status_code,
            content=http_exc.detail,
            headers=http_exc.headers,
        )

    # Global exception handler - logs all unhandled exceptions
    @app_instance.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception(
            "Unhandled exception on %s %s",
            request.method,
            request.url.path,
        )
        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"},
        )

    return app_instance
