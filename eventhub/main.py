from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator

from eventhub.api.errors import install_exception_handlers
from eventhub.api.v1.router import router as api_router
from eventhub.core.config import settings
from eventhub.core.logging import configure_logging
from eventhub.db import Database
from eventhub.middleware.rate_limit import RateLimitMiddleware
from eventhub.middleware.request_id import RequestIdMiddleware
from eventhub.middleware.security_headers import SecurityHeadersMiddleware
from eventhub.redis_client import close_redis

configure_logging()

logger = structlog.get_logger()


def create_app(database: Database | None = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        db = database or Database(settings.database_url, echo=settings.database_echo)
        # A database we cannot reach at startup is fatal.
        db.ping()
        if settings.database_auto_create:
            db.create_schema()
        app.state.database = db
        logger.info("database_ready", dialect=db.engine.dialect.name)
        try:
            yield
        finally:
            db.dispose()
            close_redis()
            logger.info("database_closed")

    app = FastAPI(title="EventHub API", lifespan=lifespan)

    # Starlette runs the LAST added middleware FIRST (outermost):
    # RequestId + SecurityHeaders wrap CORS preflight and rate-limit responses,
    # RateLimit sits closest to the app.
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(RequestIdMiddleware)

    install_exception_handlers(app)

    @app.get("/")
    def root():
        return {"name": "EventHub API", "status": "ok"}

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)
