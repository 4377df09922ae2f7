"""Service info and health endpoints."""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from agenda_scraper.services.scraper_service import AgendaScraperService
from web.dependencies import get_scraper_service

router = APIRouter(tags=["health"])


@router.get("/")
async def root(service: AgendaScraperService = Depends(get_scraper_service)) -> Dict[str, Any]:
    """Service name, version, configured agendas and example endpoints."""
    return service.info()


@router.get("/health")
async def health_check(
    service: AgendaScraperService = Depends(get_scraper_service),
) -> Dict[str, Any]:
    """
    Health check endpoint for monitoring and container orchestration.

    Returns:
        Health status with queue, browser and cache counters
    """
    return service.health()
