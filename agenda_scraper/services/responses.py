"""JSON payloads returned to API clients.

Existing chatbot integrations read different views of the same list, so every
payload carries plain labels, objects, numbered text and a JSON string.
"""

import json
from datetime import date
from typing import Any, Dict, List, Optional

from agenda_scraper.models.schemas import Practitioner, Specialty, TimeSlot, dump_wire


def numbered(labels: List[str]) -> str:
    """``"1. A\\n2. B"`` listing."""
    return "\n".join(f"{i}. {label}" for i, label in enumerate(labels, start=1))


def _list_views(prefix: str, labels: List[str], objects: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        prefix: labels,
        f"{prefix}_objects": objects,
        f"{prefix}_text": numbered(labels),
        f"{prefix}_values": list(labels),
        f"{prefix}_raw": json.dumps(objects, ensure_ascii=False),
    }


def specialties_payload(agenda: str, specialties: List[Specialty]) -> Dict[str, Any]:
    labels = [s.text for s in specialties]
    return {
        "success": True,
        "agenda": agenda,
        "total": len(labels),
        **_list_views("especialidades", labels, dump_wire(specialties)),
    }


def practitioners_payload(
    agenda: str, especialidad: str, practitioners: List[Practitioner]
) -> Dict[str, Any]:
    labels = [p.name for p in practitioners]
    return {
        "success": True,
        "agenda": agenda,
        "especialidad": especialidad,
        "total": len(labels),
        **_list_views("profesionales", labels, dump_wire(practitioners)),
    }


def slots_payload(
    agenda: str,
    especialidad: str,
    profesional: str,
    slots: List[TimeSlot],
    fecha: Optional[str] = None,
) -> Dict[str, Any]:
    labels = [s.time for s in slots]
    return {
        "success": True,
        "agenda": agenda,
        "especialidad": especialidad,
        "profesional": profesional,
        "fecha": fecha or date.today().isoformat(),
        "total": len(labels),
        **_list_views("horas", labels, dump_wire(slots)),
    }


def failure_payload(error: str, agenda: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"success": False, "error": error}
    if agenda is not None:
        payload["agenda"] = agenda
    return payload
