"""Shared dependencies for the agenda scraper web application."""

from fastapi import Request

from agenda_scraper.services.scraper_service import AgendaScraperService


def get_scraper_service(request: Request) -> AgendaScraperService:
    """Scraper service created by the application lifespan."""
    return request.app.state.scraper_service
