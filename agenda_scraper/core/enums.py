"""Centralized enum definitions for the agenda scraper."""

from enum import Enum


class WorkflowType(str, Enum):
    """Scrape workflows, named after the endpoint that triggers them."""
    ESPECIALIDADES = "especialidades"
    PROFESIONALES = "profesionales"
    HORAS = "horas"

    @classmethod
    def values(cls) -> list:
        """Return list of all enum values."""
        return [e.value for e in cls]


class SlotState(str, Enum):
    """Availability state of a time slot as shown by the booking widget."""
    AVAILABLE = "DISPONIBLE"
    TAKEN = "OCUPADO"
    UNKNOWN = "DESCONOCIDO"


class FlowState(str, Enum):
    """Position of a workflow inside the booking widget navigation flow."""
    START = "start"
    OPENED = "opened"
    SPECIALTY_LIST_VISIBLE = "specialty_list_visible"
    SPECIALTY_SELECTED = "specialty_selected"
    PRACTITIONER_LIST_VISIBLE = "practitioner_list_visible"
    PRACTITIONER_SELECTED = "practitioner_selected"
    SLOTS_VISIBLE = "slots_visible"
    DONE = "done"
    FAILED = "failed"
