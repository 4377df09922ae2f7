"""Time slot workflow."""

import re
from typing import Any

from loguru import logger
from playwright.async_api import Page

from agenda_scraper.constants import Delays, LogEmoji
from agenda_scraper.core.enums import FlowState, WorkflowType
from agenda_scraper.models.schemas import BookingSource, ScrapeResult, TimeSlot
from agenda_scraper.services.browser.page_events import PageEventHub
from agenda_scraper.services.extraction.base import (
    PRACTITIONER_NOT_FOUND,
    SPECIALTY_NOT_FOUND,
    BaseWorkflow,
    FlowTracker,
)
from agenda_scraper.services.extraction.interception import ResponseRecorder
from agenda_scraper.services.extraction.strategies import (
    InterceptedSlotsStrategy,
    RenderedSlotsStrategy,
    StrategyChain,
)

SLOT_PATTERN = re.compile(r"\d{1,2}:\d{2}")


class SlotsWorkflow(BaseWorkflow):
    """
    Lists the bookable times of one practitioner.

    The widget loads slots through a background request, so responses are
    recorded from the moment the practitioner is clicked and read before the
    rendered page is.
    """

    workflow_type = WorkflowType.HORAS
    block_resources = True

    def chain(self, recorder: ResponseRecorder) -> StrategyChain[TimeSlot]:
        return StrategyChain(
            "slots",
            [InterceptedSlotsStrategy(recorder), RenderedSlotsStrategy(self.driver)],
        )

    async def _run(
        self,
        page: Page,
        source: BookingSource,
        hub: PageEventHub,
        tracker: FlowTracker,
        **params: Any,
    ) -> ScrapeResult[TimeSlot]:
        especialidad: str = params["especialidad"]
        profesional: str = params["profesional"]

        recorder = ResponseRecorder(
            self.selectors.get("slots.application_url", "/onlinebooking/application")
            or "/onlinebooking/application"
        )
        recorder.attach(hub)
        try:
            await self.open_specialty_list(page, source, tracker)
            if not await self.select_specialty(page, especialidad, tracker):
                return ScrapeResult.failed(SPECIALTY_NOT_FOUND)
            tracker.advance(FlowState.PRACTITIONER_LIST_VISIBLE)

            recorder.arm()
            if not await self.select_practitioner(page, profesional, tracker):
                return ScrapeResult.failed(PRACTITIONER_NOT_FOUND)
            await self.driver.pause(page, Delays.AFTER_PRACTITIONER_CLICK)

            logger.info(f"{LogEmoji.WAITING} Waiting for slots of '{profesional}'")
            if await recorder.wait_for_application(self.settings.response_timeout_ms):
                await self.driver.pause(page, Delays.SLOTS_RENDER_BUFFER)
            else:
                await self.driver.wait_for_content_settle(
                    page, SLOT_PATTERN, self.settings.slot_pattern_timeout_ms
                )
            await recorder.settle()
            tracker.advance(FlowState.SLOTS_VISIBLE)

            slots = await self.chain(recorder).run(page)
            tracker.advance(FlowState.DONE)
            return ScrapeResult.ok(slots)
        finally:
            recorder.discard()
