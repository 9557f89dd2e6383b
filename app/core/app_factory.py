"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers) so
tests can build isolated instances with their own dependency overrides.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.adapters.backend.factory import close_backend
from app.api.routes import (
    app_settings_router,
    auth_router,
    businesses_router,
    dashboard_router,
    download_router,
    health_router,
    modules_router,
    profile_router,
    team_router,
    users_router,
)
from app.core.config import settings
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware
from app.core.openapi import TAGS_METADATA, apply_openapi_customizations

API_PREFIX = "/api"


def _parse_origins(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await close_backend()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Tenant Admin API",
        description=(
            "Back office for a multi-tenant SaaS: super admins manage businesses, "
            "their users and enabled modules, and publish the mobile app package. "
            "Authenticate with POST /api/auth/login and send the returned token as "
            "'Authorization: Bearer <token>'."
        ),
        version="0.1.0",
        debug=settings.app.debug,
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )

    # Middleware
    origins = _parse_origins(settings.app.cors_origins)
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
            expose_headers=[settings.log.request_id_header, "Retry-After"],
        )
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    for router in (
        auth_router,
        businesses_router,
        users_router,
        team_router,
        modules_router,
        app_settings_router,
        download_router,
        dashboard_router,
        profile_router,
    ):
        app.include_router(router, prefix=API_PREFIX)
    app.include_router(health_router)

    # OpenAPI customizations (security scheme, tags, exemptions)
    apply_openapi_customizations(app)

    return app
