from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from reflect.db import create_engine, create_session_factory, init_db

from .api.v1.routes import router as v1_router
from .core.config import Settings, get_settings
from .core.logging import configure_logging
from .insights import MoodAnalyticsEngine
from .middleware import RequestLoggingMiddleware
from .services.images import MoodImageClient
from .services.journal import JournalService
from .services.ratelimit import RateLimiter
from .services.storage import StorageService

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Configure application services during startup and ensure graceful shutdown."""

    configure_logging()
    settings: Settings = get_settings()

    engine = create_engine(settings.database_url)
    session_factory = create_session_factory(engine)
    await init_db(engine, session_factory, settings.version, settings.database_url)
    storage_service = StorageService(session_factory)
    rate_limiter = RateLimiter(
        settings.rate_limit_requests,
        settings.rate_limit_window_seconds,
    )
    image_client = MoodImageClient(
        settings.pixabay_api_key,
        timeout=settings.request_timeout_seconds,
    )
    journal_service = JournalService(
        storage_service,
        images=image_client,
        limiter=rate_limiter,
    )
    analytics_engine = MoodAnalyticsEngine(storage_service)

    app.state.settings = settings
    app.state.storage_service = storage_service
    app.state.db_engine = engine
    app.state.db_session_factory = session_factory
    app.state.rate_limiter = rate_limiter
    app.state.image_client = image_client
    app.state.journal_service = journal_service
    app.state.analytics_engine = analytics_engine

    if not image_client.available:
        logger.info("Mood images disabled: PIXABAY_API_KEY not set")
    logger.info("Starting Reflect %s", settings.version)

    try:
        yield
    finally:
        await app.state.db_engine.dispose()


app = FastAPI(title="Reflect", version=get_settings().version, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

app.include_router(v1_router)


@app.get("/healthz")
async def healthz(settings: Settings = Depends(get_settings)) -> dict[str, str]:
    return {"status": "ok", "version": settings.version}


@app.get("/readyz")
async def readyz(request: Request) -> dict[str, Any]:
    storage: StorageService = request.app.state.storage_service

    db_ok = True
    db_detail = "ok"
    schema_version: str | None = None
    try:
        await storage.healthcheck()
        schema_version = await storage.get_setting("schema_version")
    except Exception as exc:  # pragma: no cover - reported, not raised
        logger.warning("Database readiness check failed: %s", exc)
        db_ok = False
        db_detail = str(exc)

    image_client: MoodImageClient = request.app.state.image_client
    return {
        "ready": db_ok,
        "db": {"ok": db_ok, "detail": db_detail, "schema_version": schema_version},
        "images": {"enabled": image_client.available},
    }


@app.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
