"""FastAPI application entry point for the komik scraper API."""

import asyncio
import contextlib
import logging
import sys
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from errors import register_error_handlers
from services.cache import TTLCache
from services.comics import ComicService
from services.komikcast_client import KomikcastClient

# Structured logging: JSON for production, human-readable for local
if default_settings.is_production:
    logging.basicConfig(
        level=logging.INFO,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


async def _sweep_cache(cache: TTLCache, interval: float) -> None:
    """Periodically drop expired entries so unread keys don't pile up."""
    while True:
        await asyncio.sleep(interval)
        removed = cache.purge_expired()
        if removed:
            logger.info("Cache sweep removed %d expired entries", removed)


def create_app(
    settings: Settings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        problems = settings.validate()
        if problems:
            logger.warning("Configuration problems: %s", "; ".join(problems))

        client = KomikcastClient(
            base_url=settings.base_url,
            user_agent=settings.user_agent,
            timeout=settings.timeout_seconds,
            transport=transport,
        )
        app.state.comics = ComicService(client, app.state.cache)

        sweeper = None
        if settings.cache_sweep_seconds > 0:
            sweeper = asyncio.create_task(_sweep_cache(app.state.cache, settings.cache_sweep_seconds))
        app.state.cache_sweeper = sweeper

        yield

        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        await client.aclose()

    app = FastAPI(title="Komik API", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.cache = TTLCache(
        ttl_seconds=settings.cache_ttl_seconds,
        max_entries=settings.cache_max_entries,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.comics import router as comics_router
    from routes.health import router as health_router

    app.include_router(health_router)
    app.include_router(comics_router)

    return app


app = create_app()
