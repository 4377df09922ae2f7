"""FastAPI application for the agenda scraper."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from agenda_scraper import __version__
from agenda_scraper.core.config.settings import ScraperSettings, get_settings
from agenda_scraper.core.exceptions import AgendaScraperError
from agenda_scraper.core.infra.shutdown import graceful_shutdown
from agenda_scraper.services.scraper_service import AgendaScraperService
from web.exception_handlers import scraper_error_handler, unhandled_error_handler
from web.routes import agenda_router, health_router


def create_app(
    service: Optional[AgendaScraperService] = None,
    settings: Optional[ScraperSettings] = None,
) -> FastAPI:
    """
    Factory function to create FastAPI application instance.

    Args:
        service: Pre-built scraper service (tests inject one with a mock browser);
            built from settings on startup when omitted
        settings: Application settings (process singleton by default)

    Returns:
        Configured FastAPI application instance
    """
    settings = settings or (service.settings if service is not None else get_settings())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Create the scraper service on startup and close its browser on shutdown."""
        logger.info("FastAPI application starting up...")
        if getattr(app.state, "scraper_service", None) is None:
            app.state.scraper_service = AgendaScraperService(settings)
        logger.info(f"Agendas configured: {', '.join(app.state.scraper_service.list_sources())}")

        yield

        logger.info("FastAPI application shutting down...")
        await graceful_shutdown(app.state.scraper_service.shutdown, "Agenda scraper")

    is_dev = settings.env in ("development", "testing")
    app = FastAPI(
        title="Philaxmed Multi-Agenda API",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if is_dev else None,
        redoc_url=None,
        openapi_url="/openapi.json" if is_dev else None,
        description="Specialties, practitioners and available times scraped from online booking widgets.",
    )
    app.state.scraper_service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins(),
        allow_credentials=False,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AgendaScraperError, scraper_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(health_router)
    app.include_router(agenda_router)

    return app
