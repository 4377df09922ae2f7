"""Shared navigation flow of the booking widget."""

from abc import ABC, abstractmethod
from typing import Any

from loguru import logger
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agenda_scraper.constants import Delays, LogEmoji, Timeouts
from agenda_scraper.core.config.settings import ScraperSettings
from agenda_scraper.core.enums import FlowState, WorkflowType
from agenda_scraper.core.exceptions import NavigationTimeoutError
from agenda_scraper.models.schemas import BookingSource, ScrapeResult
from agenda_scraper.services.browser.page_events import PageEventHub, attach_diagnostics
from agenda_scraper.services.navigation.driver import NavigationDriver
from agenda_scraper.utils.selectors import SelectorManager

SPECIALTY_NOT_FOUND = "No se pudo seleccionar la especialidad"
PRACTITIONER_NOT_FOUND = "No se pudo seleccionar el profesional"


class FlowTracker:
    """Current position in the navigation flow, logged on every transition."""

    def __init__(self, workflow: WorkflowType, agenda: str):
        self.workflow = workflow
        self.agenda = agenda
        self.state = FlowState.START

    def advance(self, state: FlowState) -> None:
        logger.debug(f"[{self.workflow.value}:{self.agenda}] {self.state.value} -> {state.value}")
        self.state = state


class BaseWorkflow(ABC):
    """
    Drives a page from the agenda's landing URL to the list a workflow scrapes.

    Subclasses implement ``_run``; ``execute`` wraps it with page diagnostics
    whose listeners are removed when the workflow returns.
    """

    workflow_type: WorkflowType
    block_resources: bool = False

    def __init__(
        self,
        driver: NavigationDriver,
        selectors: SelectorManager,
        settings: ScraperSettings,
    ):
        self.driver = driver
        self.selectors = selectors
        self.settings = settings

    async def execute(self, page: Page, source: BookingSource, **params: Any) -> ScrapeResult:
        """
        Run the workflow on ``page``.

        Returns:
            ScrapeResult; soft failures have success=False

        Raises:
            NavigationTimeoutError: If the agenda does not load
        """
        tracker = FlowTracker(self.workflow_type, source.key)
        with PageEventHub(page) as hub:
            attach_diagnostics(hub, f"{self.workflow_type.value}:{source.key}")
            result = await self._run(page, source, hub, tracker, **params)
        result.state = tracker.state if result.success else FlowState.FAILED
        return result

    @abstractmethod
    async def _run(
        self,
        page: Page,
        source: BookingSource,
        hub: PageEventHub,
        tracker: FlowTracker,
        **params: Any,
    ) -> ScrapeResult:
        """Workflow body."""

    async def open_specialty_list(
        self, page: Page, source: BookingSource, tracker: FlowTracker
    ) -> None:
        """Load the agenda and switch the widget to its specialty listing."""
        timeout = self.settings.navigation_timeout_ms
        logger.info(f"{LogEmoji.BROWSER} Opening agenda '{source.key}'")
        try:
            await page.goto(source.url, wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightTimeoutError as e:
            raise NavigationTimeoutError(source.url, timeout) from e

        await self.selectors.wait_for_any(page, "entry.widget", timeout=Timeouts.ENTRY_WIDGET)
        tracker.advance(FlowState.OPENED)

        booking_text = self.selectors.get("entry.booking_text", "reservar hora")
        if booking_text and not await self.driver.click_by_visible_text(page, booking_text):
            logger.debug(f"'{booking_text}' not shown, assuming the widget opened on its menu")
        await self.driver.pause(page, Delays.AFTER_BOOKING_ENTRY)

        mode_text = self.selectors.get("entry.specialty_mode_text", "por especialidad")
        if mode_text and not await self.driver.click_by_visible_text(page, mode_text):
            logger.debug(f"'{mode_text}' not shown, assuming specialty listing is the default")
        await self.driver.pause(page, Delays.AFTER_SPECIALTY_MODE)

        list_ready = self.selectors.get("specialties.list_ready", ".cellWidget")
        if list_ready:
            await self.driver.wait_for_content_settle(
                page, list_ready, self.settings.selector_timeout_ms
            )
        tracker.advance(FlowState.SPECIALTY_LIST_VISIBLE)

    async def select_specialty(self, page: Page, especialidad: str, tracker: FlowTracker) -> bool:
        """Click the specialty: widget containers first, then a broad text scan."""
        container = self.selectors.get_group("specialties.clickable")
        clicked = bool(container) and await self.driver.click_in_container_by_text(
            page, container, especialidad
        )
        if not clicked:
            clicked = await self.driver.click_any_by_text(page, especialidad)
        if not clicked:
            logger.warning(f"{LogEmoji.WARNING} Specialty '{especialidad}' not found")
            return False

        await self.driver.pause(page, Delays.AFTER_SPECIALTY_CLICK)
        tracker.advance(FlowState.SPECIALTY_SELECTED)
        return True

    async def select_practitioner(
        self, page: Page, profesional: str, tracker: FlowTracker
    ) -> bool:
        """Click the practitioner card, preferring elements that carry a specialty marker."""
        marker = self.selectors.get("practitioners.specialty_marker", "especialidad:")
        clicked = await self.driver.click_any_by_text(page, profesional, prefer_marker=marker)
        if not clicked:
            logger.warning(f"{LogEmoji.WARNING} Practitioner '{profesional}' not found")
            return False
        tracker.advance(FlowState.PRACTITIONER_SELECTED)
        return True
