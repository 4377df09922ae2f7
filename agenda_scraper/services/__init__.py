"""Services for the agenda scraper."""

from .scraper_service import AgendaScraperService

__all__ = ["AgendaScraperService"]
