"""Ordered extraction strategies.

Each strategy reads the page one way and returns what it found, or nothing.
A ``StrategyChain`` tries them in order and keeps the first non-empty result.
"""

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, Sequence, TypeVar

from loguru import logger
from playwright.async_api import Page

from agenda_scraper.constants import LogEmoji
from agenda_scraper.models.schemas import Practitioner, Specialty, TimeSlot
from agenda_scraper.services.extraction.interception import ResponseRecorder
from agenda_scraper.services.extraction.parsers import (
    find_times_in_payload,
    find_times_in_text,
    parse_practitioner_cards,
    parse_practitioner_lines,
    parse_slot_lines,
    parse_specialty_items,
    parse_specialty_lines,
    slots_from_times,
)
from agenda_scraper.services.navigation.driver import NavigationDriver
from agenda_scraper.utils.selectors import SelectorManager
from agenda_scraper.utils.text import split_lines

T = TypeVar("T")


class ExtractionStrategy(ABC, Generic[T]):
    """One way of reading a list of items off the page."""

    name: str = "strategy"

    @abstractmethod
    async def try_extract(self, page: Page) -> Optional[List[T]]:
        """Return the items found, or None/[] when this strategy does not apply."""


class StrategyChain(Generic[T]):
    """First non-empty result of an ordered list of strategies."""

    def __init__(self, label: str, strategies: Sequence[ExtractionStrategy[T]]):
        self.label = label
        self.strategies = list(strategies)

    async def run(self, page: Page) -> List[T]:
        for strategy in self.strategies:
            items = await strategy.try_extract(page)
            if items:
                logger.info(
                    f"{LogEmoji.FOUND} {len(items)} {self.label} extracted via {strategy.name}"
                )
                return list(items)
            logger.debug(f"{self.label}: {strategy.name} found nothing")
        logger.info(f"{LogEmoji.WARNING} No {self.label} found on page")
        return []


class SpecialtyContainerStrategy(ExtractionStrategy[Specialty]):
    """Specialty widgets (``.cellWidget`` and friends)."""

    name = "container elements"

    def __init__(self, driver: NavigationDriver, selectors: SelectorManager):
        self.driver = driver
        self.selectors = selectors

    async def try_extract(self, page: Page) -> Optional[List[Specialty]]:
        group = self.selectors.get_group("specialties.items")
        if not group:
            return None
        return parse_specialty_items(await self.driver.collect_elements(page, group))


class SpecialtyBodyTextStrategy(ExtractionStrategy[Specialty]):
    """Every meaningful line of rendered text."""

    name = "body text"

    def __init__(self, driver: NavigationDriver):
        self.driver = driver

    async def try_extract(self, page: Page) -> Optional[List[Specialty]]:
        return parse_specialty_lines(split_lines(await self.driver.read_body_text(page)))


class PractitionerTextStrategy(ExtractionStrategy[Practitioner]):
    """Name line followed by an ``Especialidad:`` line."""

    name = "text lines"

    def __init__(self, driver: NavigationDriver, specialty: Optional[str] = None):
        self.driver = driver
        self.specialty = specialty

    async def try_extract(self, page: Page) -> Optional[List[Practitioner]]:
        lines = split_lines(await self.driver.read_body_text(page))
        return parse_practitioner_lines(lines, specialty=self.specialty)


class PractitionerCardStrategy(ExtractionStrategy[Practitioner]):
    """Practitioner card elements."""

    name = "card elements"

    def __init__(
        self,
        driver: NavigationDriver,
        selectors: SelectorManager,
        specialty: Optional[str] = None,
    ):
        self.driver = driver
        self.selectors = selectors
        self.specialty = specialty

    async def try_extract(self, page: Page) -> Optional[List[Practitioner]]:
        group = self.selectors.get_group("practitioners.cards")
        if not group:
            return None
        items = await self.driver.collect_elements(page, group)
        return parse_practitioner_cards(items, specialty=self.specialty)


class InterceptedSlotsStrategy(ExtractionStrategy[TimeSlot]):
    """Times found in background responses, newest response first."""

    name = "intercepted responses"

    def __init__(self, recorder: ResponseRecorder):
        self.recorder = recorder

    async def try_extract(self, page: Page) -> Optional[List[TimeSlot]]:
        for captured in self.recorder.since_armed():
            if captured.is_json:
                times = find_times_in_payload(captured.body)
            elif self.recorder.application_fragment in captured.url.lower():
                times = find_times_in_text(captured.body)
            else:
                continue
            if times:
                logger.debug(f"{len(times)} times found in response from {captured.url}")
                return slots_from_times(times)
        return None


class RenderedSlotsStrategy(ExtractionStrategy[TimeSlot]):
    """``HH:MM`` lines in the rendered page, with their availability label."""

    name = "rendered text"

    def __init__(self, driver: NavigationDriver):
        self.driver = driver

    async def try_extract(self, page: Page) -> Optional[List[TimeSlot]]:
        return parse_slot_lines(split_lines(await self.driver.read_body_text(page)))
