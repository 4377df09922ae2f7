"""Data models for the agenda scraper."""

from .schemas import BookingSource, Practitioner, ScrapeResult, Specialty, TimeSlot, dump_wire

__all__ = [
    "BookingSource",
    "Practitioner",
    "ScrapeResult",
    "Specialty",
    "TimeSlot",
    "dump_wire",
]
