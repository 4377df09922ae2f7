"""Routes package for the agenda scraper web application."""

from .agenda import router as agenda_router
from .health import router as health_router

__all__ = [
    "agenda_router",
    "health_router",
]
