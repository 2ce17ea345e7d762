"""FastAPI application entrypoint."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from portfolio_tracker import __version__
from portfolio_tracker.api.errors import register_exception_handlers
from portfolio_tracker.api.routes import api_router
from portfolio_tracker.config import get_settings
from portfolio_tracker.core.logging import setup_logging
from portfolio_tracker.core.telemetry import setup_telemetry
from portfolio_tracker.db.init import init_database
from portfolio_tracker.db.session import dispose_engine, get_engine
from portfolio_tracker.providers import NaverFinanceClient, YahooFinanceClient
from portfolio_tracker.services.pricing import PriceResolver

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the schema and the shared HTTP client; tear both down on exit."""

    settings = get_settings()
    engine = get_engine()
    setup_telemetry(app, settings, engine=engine)
    logger.info("Portfolio tracker configuration: %s", settings.dict_for_logging())
    await init_database(engine)

    http_client = httpx.AsyncClient(timeout=settings.price_request_timeout_seconds, follow_redirects=True)
    app.state.price_resolver = PriceResolver(
        YahooFinanceClient(timeout_seconds=settings.price_request_timeout_seconds),
        NaverFinanceClient(http_client),
        max_concurrency=settings.price_fallback_concurrency,
    )
    try:
        yield
    finally:
        await http_client.aclose()
        await dispose_engine()


def create_app() -> FastAPI:
    """Build the application with routes, CORS, and error handlers attached."""

    settings = get_settings()
    setup_logging()
    app = FastAPI(title=settings.app_name, version=__version__, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)
    app.include_router(api_router)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        """Return service readiness metadata."""

        return {"status": "ok", "timestamp": datetime.now().isoformat()}

    return app


app = create_app()

__all__ = ["app", "create_app"]
