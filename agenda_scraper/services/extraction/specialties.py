"""Specialty listing workflow."""

from typing import Any

from playwright.async_api import Page

from agenda_scraper.core.enums import FlowState, WorkflowType
from agenda_scraper.models.schemas import BookingSource, ScrapeResult, Specialty
from agenda_scraper.services.browser.page_events import PageEventHub
from agenda_scraper.services.extraction.base import BaseWorkflow, FlowTracker
from agenda_scraper.services.extraction.strategies import (
    SpecialtyBodyTextStrategy,
    SpecialtyContainerStrategy,
    StrategyChain,
)


class SpecialtiesWorkflow(BaseWorkflow):
    """Lists the specialties an agenda offers."""

    workflow_type = WorkflowType.ESPECIALIDADES

    def chain(self) -> StrategyChain[Specialty]:
        return StrategyChain(
            "specialties",
            [
                SpecialtyContainerStrategy(self.driver, self.selectors),
                SpecialtyBodyTextStrategy(self.driver),
            ],
        )

    async def _run(
        self,
        page: Page,
        source: BookingSource,
        hub: PageEventHub,
        tracker: FlowTracker,
        **params: Any,
    ) -> ScrapeResult[Specialty]:
        await self.open_specialty_list(page, source, tracker)
        specialties = await self.chain().run(page)
        tracker.advance(FlowState.DONE)
        return ScrapeResult.ok(specialties)
