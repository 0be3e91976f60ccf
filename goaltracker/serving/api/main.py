"""
FastAPI Application Factory

Creates and configures the API application.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from goaltracker.config import get_settings
from goaltracker.serving.api.errors import register_error_handlers
from goaltracker.serving.api.middleware import (
    RateLimitMiddleware,
    RequestLoggingMiddleware,
    SecurityHeadersMiddleware,
)
from goaltracker.serving.api.routes import (
    advisors_router,
    health_router,
    matrix_router,
    portal_router,
    reports_router,
    sessions_router,
    store_metrics_router,
    templates_router,
)

settings = get_settings()


def create_api_app(lifespan=None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Startup/shutdown handler; tests pass none and wire the
            database themselves

    Returns:
        Configured FastAPI app instance
    """
    app = FastAPI(
        title="Daily Sales Goal Tracker API",
        description="Hourly goal allocation and progress tracking for sales advisors",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware,
        max_requests=settings.security.rate_limit_requests,
        window_seconds=settings.security.rate_limit_window_seconds,
    )

    register_error_handlers(app)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(sessions_router, prefix="/api/v1/sessions", tags=["Sessions"])
    app.include_router(store_metrics_router, prefix="/api/v1/sessions", tags=["Store Metrics"])
    app.include_router(advisors_router, prefix="/api/v1", tags=["Advisors"])
    app.include_router(portal_router, prefix="/api/v1/portal", tags=["Advisor Portal"])
    app.include_router(templates_router, prefix="/api/v1/templates", tags=["Templates"])
    app.include_router(reports_router, prefix="/api/v1/reports", tags=["Reports"])
    app.include_router(matrix_router, prefix="/api/v1/matrix", tags=["Goal Matrix"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "timezone": settings.tracker.timezone,
            "currency": settings.tracker.currency,
        }

    return app
