from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware

from app.api.router import api_router
from app.api.routes import meta
from app.clients.tomorrow import TomorrowClient
from app.core.config import Settings, load_settings
from app.core.errors import register_exception_handlers
from app.core.logging import RequestLogMiddleware, configure_logging
from app.db.mongo import MongoDatabase, create_mongo_client

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.settings = settings
        app.state.weather_client = TomorrowClient(
            api_key=settings.tomorrow_api_key,
            timeout_seconds=settings.weather_timeout_seconds,
            base_url=str(settings.tomorrow_api_base_url),
            use_mock=settings.mock_weather_enabled,
        )
        app.state.database = MongoDatabase(create_mongo_client(settings))

        if app.state.weather_client.use_mock:
            logger.warning("Using mock weather data, no upstream requests will be made")
        elif not settings.tomorrow_api_key:
            logger.warning("APP_TOMORROW_API_KEY is not set, weather requests will fail")

        if settings.mongodb_ping_on_startup:
            try:
                await app.state.database.ping()
            except Exception:
                logger.exception("MongoDB is unreachable at startup")
                await app.state.weather_client.aclose()
                await app.state.database.close()
                raise
            logger.info("MongoDB connected")

        app.state.started_at = time.monotonic()
        logger.info("Weather gateway started (env=%s)", settings.env)
        yield
        await app.state.weather_client.aclose()
        await app.state.database.close()
        logger.info("Weather gateway stopped")

    docs_enabled = settings.docs_enabled and not settings.is_production
    app = FastAPI(
        title="Weather Gateway API",
        version="0.1.0",
        debug=settings.debug,
        docs_url="/docs" if docs_enabled else None,
        redoc_url=None,
        openapi_url="/openapi.json" if docs_enabled else None,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(GZipMiddleware, minimum_size=1024)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type"],
        expose_headers=["X-Token-Expiry-Warning", "X-Token-Expires-In", "X-Token-Type"],
    )
    if settings.trusted_hosts:
        app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)
    app.add_middleware(RequestLogMiddleware)

    @app.middleware("http")
    async def security_headers(request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        response.headers.setdefault("Cross-Origin-Opener-Policy", "same-origin")
        response.headers.setdefault("Cross-Origin-Resource-Policy", "same-site")
        if settings.is_production:
            response.headers.setdefault(
                "Strict-Transport-Security", "max-age=31536000; includeSubDomains"
            )
        return response

    register_exception_handlers(app, settings)
    app.include_router(meta.router, tags=["meta"])
    app.include_router(api_router)
    return app
