"""Main FastAPI application for the media server pool API.

The lifespan handler is the composition root: it builds the pool, starts
its health checks, and stops them on shutdown.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, REGISTRY, generate_latest

from media_pool import MediaServerPool, PoolMetrics, get_config
from media_pool.logging_config import setup_logging
from pool_api.config import Settings, get_settings
from pool_api.middleware.error_handler import setup_exception_handlers
from pool_api.routes import media_servers

logger = logging.getLogger(__name__)


def build_pool() -> MediaServerPool:
    """Build the pool from environment configuration.

    Returns:
        MediaServerPool with the configured servers registered
    """
    config = get_config()
    return MediaServerPool.from_config(config, metrics=PoolMetrics())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown.

    Args:
        app: FastAPI application instance.
    """
    logger.info("Starting Media Server Pool API...")

    if app.state.pool is None:
        app.state.pool = build_pool()

    pool: MediaServerPool = app.state.pool
    pool.start_health_checks()
    logger.info(f"Media Server Pool API ready on port {app.state.settings.port}")

    try:
        yield
    finally:
        logger.info("Shutting down Media Server Pool API...")
        await pool.aclose()


def create_app(
    settings: Optional[Settings] = None, pool: Optional[MediaServerPool] = None
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Service settings (defaults to environment)
        pool: Pre-built pool; built from environment at startup when omitted

    Returns:
        FastAPI application
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="REST API for monitoring and managing the media server pool",
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.pool = pool

    if settings.api_token is None:
        logger.warning("API_TOKEN not set; media server endpoints are unauthenticated")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_exception_handlers(app)

    app.include_router(
        media_servers.router,
        prefix=f"{settings.api_prefix}/media-servers",
        tags=["Media Servers"],
    )

    @app.get("/health")
    async def health_check():
        """Service health check endpoint."""
        current_pool = app.state.pool
        return {
            "status": "healthy",
            "service": settings.app_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "environment": settings.environment,
            "health_checks_running": bool(current_pool and current_pool.is_running),
        }

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        current_pool = app.state.pool
        if current_pool is not None and current_pool.metrics is not None:
            payload = current_pool.metrics.get_metrics()
        else:
            payload = generate_latest(REGISTRY)
        return Response(content=payload, media_type=CONTENT_TYPE_LATEST)

    return app


app = create_app()


def run() -> None:
    """Run the API with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level, json_format=settings.log_json)
    uvicorn.run(
        "pool_api.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
