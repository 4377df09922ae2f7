"""Scrape endpoints: specialties, practitioners and time slots."""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from agenda_scraper.services.scraper_service import AgendaScraperService
from web.dependencies import get_scraper_service

router = APIRouter(prefix="/api", tags=["agenda"])


@router.get("/especialidades")
async def get_especialidades(
    agenda: Optional[str] = Query(default=None, description="Agenda key"),
    service: AgendaScraperService = Depends(get_scraper_service),
) -> Dict[str, Any]:
    """
    List the specialties of an agenda.

    Returns:
        Specialty payload, or ``success: false`` when the widget could not be read
    """
    return await service.get_specialties(agenda)


@router.get("/profesionales")
async def get_profesionales(
    agenda: Optional[str] = Query(default=None, description="Agenda key"),
    especialidad: Optional[str] = Query(default=None, description="Specialty label"),
    service: AgendaScraperService = Depends(get_scraper_service),
) -> Dict[str, Any]:
    """List the practitioners of a specialty."""
    return await service.get_practitioners(agenda, especialidad)


@router.get("/horas")
async def get_horas(
    agenda: Optional[str] = Query(default=None, description="Agenda key"),
    especialidad: Optional[str] = Query(default=None, description="Specialty label"),
    profesional: Optional[str] = Query(default=None, description="Practitioner name"),
    fecha: Optional[str] = Query(default=None, description="Date echoed in the response"),
    service: AgendaScraperService = Depends(get_scraper_service),
) -> Dict[str, Any]:
    """List the available times of a practitioner."""
    return await service.get_slots(agenda, especialidad, profesional, fecha)
