"""Scrape workflows and the strategies/parsers they use."""

from .base import PRACTITIONER_NOT_FOUND, SPECIALTY_NOT_FOUND, BaseWorkflow, FlowTracker
from .interception import CapturedResponse, ResponseRecorder
from .practitioners import PractitionersWorkflow
from .slots import SlotsWorkflow
from .specialties import SpecialtiesWorkflow
from .strategies import ExtractionStrategy, StrategyChain

__all__ = [
    "BaseWorkflow",
    "CapturedResponse",
    "ExtractionStrategy",
    "FlowTracker",
    "PRACTITIONER_NOT_FOUND",
    "PractitionersWorkflow",
    "ResponseRecorder",
    "SPECIALTY_NOT_FOUND",
    "SlotsWorkflow",
    "SpecialtiesWorkflow",
    "StrategyChain",
]
