"""Tests for the three scrape workflows driven against a fake booking widget."""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agenda_scraper.constants import Delays
from agenda_scraper.core.enums import FlowState, SlotState
from agenda_scraper.core.exceptions import NavigationTimeoutError
from agenda_scraper.models.schemas import BookingSource
from agenda_scraper.services.extraction import (
    PRACTITIONER_NOT_FOUND,
    SPECIALTY_NOT_FOUND,
    PractitionersWorkflow,
    SlotsWorkflow,
    SpecialtiesWorkflow,
)
from agenda_scraper.services.navigation.driver import NavigationDriver

SOURCE = BookingSource(key="kineyfisio", url="https://web.philaxmed.cl/ReservaOnline.html?mc=kineyfisio#_")

PRACTITIONER_LIST = (
    "Dr. Ana Lopez\nEspecialidad: Kinesiología\nSucursal: Centro\n"
    "Dr. Pedro Rojas\nEspecialidad: Kinesiología\nPróxima hora: Lunes 10:00"
)
PRACTITIONER_CARD = "Dr. Ana Lopez Especialidad: Kinesiología Sucursal: Centro"


@pytest.fixture
def driver(selectors):
    return NavigationDriver(selectors, click_timeout_ms=10, selector_timeout_ms=10)


@pytest.fixture
def widget_page(fake_page_factory, selectors):
    """A widget that opens on its menu and lists two specialties."""

    def make(**kwargs):
        specialties = [
            {"text": "KINESIOLOGÍA", "title": "KINESIOLOGÍA", "value": "1"},
            {"text": "FONOAUDIOLOGÍA", "title": "FONOAUDIOLOGÍA", "value": "2"},
        ]
        return fake_page_factory(
            buttons=["Reservar hora", "Por especialidad"],
            selectors_present=[".cellWidget"],
            elements={
                selectors.get_group("specialties.items"): specialties,
                selectors.get_group("specialties.clickable"): specialties,
            },
            **kwargs,
        )

    return make


def application_response(body):
    response = MagicMock()
    response.url = "https://web.philaxmed.cl/onlinebooking/application?mc=kineyfisio"
    response.status = 200
    response.headers = {"content-type": "application/json"}
    response.request.resource_type = "xhr"
    response.text = AsyncMock(return_value=json.dumps(body))
    return response


class TestSpecialtiesWorkflow:
    """Tests for SpecialtiesWorkflow."""

    @pytest.mark.asyncio
    async def test_lists_specialties(self, driver, selectors, test_settings, widget_page):
        page = widget_page()
        workflow = SpecialtiesWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(page, SOURCE)

        assert result.success
        assert [s.text for s in result.items] == ["KINESIOLOGÍA", "FONOAUDIOLOGÍA"]
        assert result.state == FlowState.DONE
        assert page.visited == [SOURCE.url]
        assert page.clicks == ["Reservar hora", "Por especialidad"]
        assert page.pauses[:2] == [Delays.AFTER_BOOKING_ENTRY, Delays.AFTER_SPECIALTY_MODE]

    @pytest.mark.asyncio
    async def test_blank_page_is_empty_success(
        self, driver, selectors, test_settings, fake_page_factory
    ):
        page = fake_page_factory()
        workflow = SpecialtiesWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(page, SOURCE)

        assert result.success
        assert result.items == []

    @pytest.mark.asyncio
    async def test_body_text_fallback(self, driver, selectors, test_settings, fake_page_factory):
        page = fake_page_factory(body_text="Reservar hora\nPor especialidad\nKINESIOLOGÍA\nNUTRICIÓN")
        workflow = SpecialtiesWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(page, SOURCE)

        assert [s.text for s in result.items] == ["KINESIOLOGÍA", "NUTRICIÓN"]

    @pytest.mark.asyncio
    async def test_navigation_timeout_raises(
        self, driver, selectors, test_settings, fake_page_factory
    ):
        page = fake_page_factory(goto_error=PlaywrightTimeoutError("Timeout 1000ms exceeded"))
        workflow = SpecialtiesWorkflow(driver, selectors, test_settings)

        with pytest.raises(NavigationTimeoutError) as exc_info:
            await workflow.execute(page, SOURCE)

        assert exc_info.value.http_status == 504
        assert all(not handlers for handlers in page.listeners.values())

    @pytest.mark.asyncio
    async def test_listeners_removed_after_run(self, driver, selectors, test_settings, widget_page):
        page = widget_page()

        await SpecialtiesWorkflow(driver, selectors, test_settings).execute(page, SOURCE)

        assert page.listeners
        assert all(not handlers for handlers in page.listeners.values())


class TestPractitionersWorkflow:
    """Tests for PractitionersWorkflow."""

    @pytest.mark.asyncio
    async def test_lists_practitioners(self, driver, selectors, test_settings, widget_page):
        page = widget_page()
        page.on_click["KINESIOLOGÍA"] = lambda p: setattr(p, "body_text", PRACTITIONER_LIST)
        workflow = PractitionersWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(page, SOURCE, especialidad="kinesiologia")

        assert result.success
        assert [p.name for p in result.items] == ["Dr. Ana Lopez", "Dr. Pedro Rojas"]
        assert result.items[0].branch == "Centro"
        assert Delays.AFTER_SPECIALTY_CLICK in page.pauses

    @pytest.mark.asyncio
    async def test_specialty_found_by_broad_scan(
        self, driver, selectors, test_settings, fake_page_factory
    ):
        page = fake_page_factory(clickable=["Kinesiología"])
        page.on_click["Kinesiología"] = lambda p: setattr(p, "body_text", PRACTITIONER_LIST)
        workflow = PractitionersWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(page, SOURCE, especialidad="KINESIOLOGÍA")

        assert len(result.items) == 2

    @pytest.mark.asyncio
    async def test_unknown_specialty_is_soft_failure(
        self, driver, selectors, test_settings, widget_page
    ):
        page = widget_page()
        workflow = PractitionersWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(page, SOURCE, especialidad="Odontología")

        assert not result.success
        assert result.error == SPECIALTY_NOT_FOUND
        assert result.state == FlowState.FAILED


class TestSlotsWorkflow:
    """Tests for SlotsWorkflow."""

    @pytest.mark.asyncio
    async def test_rendered_slots(self, driver, selectors, test_settings, widget_page):
        page = widget_page()
        page.clickable = [PRACTITIONER_CARD]
        page.on_click["KINESIOLOGÍA"] = lambda p: setattr(p, "body_text", PRACTITIONER_LIST)
        page.on_click[PRACTITIONER_CARD] = lambda p: setattr(
            p, "body_text", "Lunes 12\n09:00 DISPONIBLE\n09:30 OCUPADO\n10:00 DISPONIBLE"
        )
        workflow = SlotsWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(
            page, SOURCE, especialidad="Kinesiología", profesional="Dr. Ana Lopez"
        )

        assert result.success
        assert [s.time for s in result.items] == ["09:00", "10:00"]
        assert all(s.state == SlotState.AVAILABLE for s in result.items)
        assert result.state == FlowState.DONE

    @pytest.mark.asyncio
    async def test_intercepted_slots_win(self, driver, selectors, test_settings, widget_page):
        page = widget_page()
        page.clickable = [PRACTITIONER_CARD]
        page.on_click[PRACTITIONER_CARD] = lambda p: p.emit(
            "response", application_response({"horas": [{"hora": "11:00"}, {"hora": "11:30"}]})
        )
        workflow = SlotsWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(
            page, SOURCE, especialidad="Kinesiología", profesional="dr. ana lopez"
        )

        assert [s.time for s in result.items] == ["11:00", "11:30"]
        assert all(s.state == SlotState.UNKNOWN for s in result.items)
        assert Delays.SLOTS_RENDER_BUFFER in page.pauses

    @pytest.mark.asyncio
    async def test_unknown_practitioner_is_soft_failure(
        self, driver, selectors, test_settings, widget_page
    ):
        page = widget_page()
        workflow = SlotsWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(
            page, SOURCE, especialidad="Kinesiología", profesional="Dr. Nadie"
        )

        assert not result.success
        assert result.error == PRACTITIONER_NOT_FOUND

    @pytest.mark.asyncio
    async def test_early_exit_cancels_body_reads(
        self, driver, selectors, test_settings, widget_page
    ):
        async def never_arrives():
            await asyncio.Event().wait()

        response = application_response({})
        response.text = never_arrives
        page = widget_page()
        page.on_click["KINESIOLOGÍA"] = lambda p: p.emit("response", response)
        workflow = SlotsWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(
            page, SOURCE, especialidad="Kinesiología", profesional="Dr. Nadie"
        )
        await asyncio.sleep(0)

        assert result.error == PRACTITIONER_NOT_FOUND
        pending = [t for t in asyncio.all_tasks() if "_capture" in t.get_coro().__qualname__]
        assert pending == []

    @pytest.mark.asyncio
    async def test_no_slots_is_empty_success(self, driver, selectors, test_settings, widget_page):
        page = widget_page()
        page.clickable = [PRACTITIONER_CARD]
        workflow = SlotsWorkflow(driver, selectors, test_settings)

        result = await workflow.execute(
            page, SOURCE, especialidad="Kinesiología", profesional="Dr. Ana Lopez"
        )

        assert result.success
        assert result.items == []

    def test_blocks_heavy_resources(self):
        assert SlotsWorkflow.block_resources
        assert not SpecialtiesWorkflow.block_resources
