"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from djcafe.core.config import get_settings
from djcafe.core.database import dispose_engine
from djcafe.core.exceptions import register_exception_handlers
from djcafe.core.health import router as health_router
from djcafe.core.logging import configure_logging, get_logger
from djcafe.core.middleware import RequestIdMiddleware
from djcafe.features.campaigns.routes import router as campaigns_router
from djcafe.features.catalog.routes import router as catalog_router
from djcafe.features.display.routes import router as display_router
from djcafe.features.jobs.routes import router as jobs_router
from djcafe.features.jobs.scheduler import PriceScheduler
from djcafe.features.notifications.relay import get_campaign_relay, get_price_relay
from djcafe.features.notifications.routes import router as events_router
from djcafe.features.pricing.routes import router as pricing_router
from djcafe.features.tables.routes import router as tables_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Start the LISTEN relays and the scheduler; stop them on shutdown.

    Args:
        _app: FastAPI application instance (unused, required by lifespan protocol).

    Yields:
        None after startup, cleans up on shutdown.
    """
    settings = get_settings()

    configure_logging()
    logger.info(
        "app.startup_started",
        app_name=settings.app_name,
        app_env=settings.app_env,
        debug=settings.debug,
    )

    relays = [get_price_relay(), get_campaign_relay()]
    for relay in relays:
        await relay.start()

    scheduler = PriceScheduler(settings=settings)
    if settings.scheduler_enabled:
        await scheduler.start()

    yield

    await scheduler.stop()
    for relay in relays:
        await relay.stop()
    await dispose_engine()
    logger.info("app.shutdown_completed")


def create_app() -> FastAPI:
    """Create and configure FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Menu, dynamic pricing, tables and TV promotion for DJ Cafe",
        version="0.1.0",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
    )

    # Middleware (first added = innermost)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIdMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(catalog_router)
    app.include_router(pricing_router)
    app.include_router(tables_router)
    app.include_router(campaigns_router)
    app.include_router(display_router)
    app.include_router(events_router)
    app.include_router(jobs_router)

    return app


app = create_app()
