"""Practitioner listing workflow."""

from typing import Any

from playwright.async_api import Page

from agenda_scraper.core.enums import FlowState, WorkflowType
from agenda_scraper.models.schemas import BookingSource, Practitioner, ScrapeResult
from agenda_scraper.services.browser.page_events import PageEventHub
from agenda_scraper.services.extraction.base import SPECIALTY_NOT_FOUND, BaseWorkflow, FlowTracker
from agenda_scraper.services.extraction.strategies import (
    PractitionerCardStrategy,
    PractitionerTextStrategy,
    StrategyChain,
)


class PractitionersWorkflow(BaseWorkflow):
    """Lists the practitioners of one specialty."""

    workflow_type = WorkflowType.PROFESIONALES

    def chain(self, especialidad: str) -> StrategyChain[Practitioner]:
        return StrategyChain(
            "practitioners",
            [
                PractitionerTextStrategy(self.driver, specialty=especialidad),
                PractitionerCardStrategy(self.driver, self.selectors, specialty=especialidad),
            ],
        )

    async def _run(
        self,
        page: Page,
        source: BookingSource,
        hub: PageEventHub,
        tracker: FlowTracker,
        **params: Any,
    ) -> ScrapeResult[Practitioner]:
        especialidad: str = params["especialidad"]

        await self.open_specialty_list(page, source, tracker)
        if not await self.select_specialty(page, especialidad, tracker):
            return ScrapeResult.failed(SPECIALTY_NOT_FOUND)

        tracker.advance(FlowState.PRACTITIONER_LIST_VISIBLE)
        practitioners = await self.chain(especialidad).run(page)
        tracker.advance(FlowState.DONE)
        return ScrapeResult.ok(practitioners)
