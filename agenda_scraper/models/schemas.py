"""Pydantic models for scraped booking data."""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from agenda_scraper.core.enums import FlowState, SlotState

T = TypeVar("T")


class BookingSource(BaseModel):
    """A configured booking widget (agenda)."""

    model_config = ConfigDict(frozen=True)

    key: str
    url: str


class Specialty(BaseModel):
    """Specialty entry from the widget's specialty list."""

    text: str
    value: str


class Practitioner(BaseModel):
    """Practitioner card parsed from the practitioner list."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(alias="nombre")
    value: str
    specialty: Optional[str] = Field(default=None, alias="especialidad")
    branch: Optional[str] = Field(default=None, alias="sucursal")
    next_slot: Optional[str] = Field(default=None, alias="proxima_hora")


class TimeSlot(BaseModel):
    """Bookable clock time."""

    model_config = ConfigDict(populate_by_name=True)

    time: str = Field(alias="hora", pattern=r"^\d{2}:\d{2}$")
    state: SlotState = Field(default=SlotState.AVAILABLE, alias="estado")


class ScrapeResult(BaseModel, Generic[T]):
    """
    Outcome of one workflow run.

    ``success=False`` carries a soft failure (an expected UI element was not
    found); infrastructure failures are raised as exceptions instead.
    """

    success: bool
    items: List[T] = Field(default_factory=list)
    error: Optional[str] = None
    state: FlowState = FlowState.START

    @classmethod
    def ok(cls, items: List[T], state: FlowState = FlowState.DONE) -> "ScrapeResult[T]":
        return cls(success=True, items=items, state=state)

    @classmethod
    def failed(cls, error: str, state: FlowState = FlowState.FAILED) -> "ScrapeResult[T]":
        return cls(success=False, error=error, state=state)


def dump_wire(models: List[BaseModel]) -> List[Dict[str, Any]]:
    """Serialize models with their wire (Spanish) field names."""
    return [m.model_dump(by_alias=True, mode="json", exclude_none=True) for m in models]
