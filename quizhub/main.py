"""
QuizHub - online question bank and exam practice
FastAPI application factory
"""

import logging
from contextlib import asynccontextmanager

import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration
from sqlalchemy.exc import SQLAlchemyError

from quizhub.api.api import api_router
from quizhub.core.cache import CacheManager
from quizhub.core.config import settings
from quizhub.core.database import engine, init_db
from quizhub.core.exceptions import register_exception_handlers
from quizhub.core.logging import setup_logging
from quizhub.db.schema_check import verify_schema
from quizhub.middleware import (
    LoggingMiddleware,
    RequestIDMiddleware,
    SecurityHeadersMiddleware,
    setup_cors,
    setup_rate_limiting,
)
from quizhub.models.base import utcnow
from quizhub.realtime import ConnectionManager
from quizhub.realtime.routes import router as socket_router

logger = logging.getLogger(__name__)


def init_sentry() -> None:
    if not settings.SENTRY_DSN:
        return
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
        ],
        traces_sample_rate=1.0 if settings.DEBUG else 0.1,
        environment=settings.ENVIRONMENT,
    )
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    init_db()
    try:
        report = verify_schema(engine)
        if not report["ok"]:
            logger.warning("Database schema is behind the models; run `alembic upgrade head`")
    except SQLAlchemyError as e:
        logger.error(f"Schema verification failed: {e}")

    await app.state.cache.connect()

    yield

    logger.info("Shutting down application")
    await app.state.cache.disconnect()


def create_app() -> FastAPI:
    """Build the application with its own notifier and cache"""
    setup_logging()
    init_sentry()

    app = FastAPI(
        title=settings.PROJECT_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.notifier = ConnectionManager(
        ping_interval=settings.SOCKET_PING_INTERVAL,
        ping_timeout=settings.SOCKET_PING_TIMEOUT,
        queue_size=settings.SOCKET_QUEUE_SIZE,
    )
    app.state.cache = CacheManager()

    # Innermost first
    if settings.RATE_LIMIT_ENABLED:
        setup_rate_limiting(app)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    setup_cors(app)

    register_exception_handlers(app)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": f"Welcome to {settings.APP_NAME}",
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    @app.get("/health", tags=["System"])
    async def health():
        """Liveness probe"""
        return {"status": "ok", "timestamp": utcnow().isoformat(), "version": settings.APP_VERSION}

    app.include_router(api_router, prefix=settings.API_PREFIX)
    app.include_router(socket_router, prefix="/socket", tags=["Notifier"])
    return app


app = create_app()
