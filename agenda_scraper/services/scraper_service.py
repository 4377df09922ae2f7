"""Request handling for the agenda scraper: validate, cache, queue, scrape."""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from playwright.async_api import Error as PlaywrightError

from agenda_scraper import __version__
from agenda_scraper.constants import LogEmoji
from agenda_scraper.core.config.settings import ScraperSettings, get_settings
from agenda_scraper.core.enums import WorkflowType
from agenda_scraper.core.exceptions import (
    AutomationError,
    BrowserSessionError,
    MissingParameterError,
    UnknownSourceError,
)
from agenda_scraper.models.schemas import BookingSource, ScrapeResult
from agenda_scraper.services.browser.session_manager import BrowserSessionManager, is_browser_gone
from agenda_scraper.services.cache.response_cache import ResponseCache
from agenda_scraper.services.extraction.base import BaseWorkflow
from agenda_scraper.services.extraction.practitioners import PractitionersWorkflow
from agenda_scraper.services.extraction.slots import SlotsWorkflow
from agenda_scraper.services.extraction.specialties import SpecialtiesWorkflow
from agenda_scraper.services.navigation.driver import NavigationDriver
from agenda_scraper.services.queue.serial_queue import SerialExecutionQueue
from agenda_scraper.services.responses import (
    failure_payload,
    practitioners_payload,
    slots_payload,
    specialties_payload,
)
from agenda_scraper.utils.selectors import SelectorManager

PayloadBuilder = Callable[[List[Any]], Dict[str, Any]]


class AgendaScraperService:
    """
    Entry point for the three scrape operations.

    Requests are validated before anything touches the browser. Cache hits are
    answered directly; misses are queued so only one workflow drives the
    shared browser at a time.
    """

    def __init__(
        self,
        settings: Optional[ScraperSettings] = None,
        session: Optional[BrowserSessionManager] = None,
        queue: Optional[SerialExecutionQueue] = None,
        cache: Optional[ResponseCache] = None,
        selectors: Optional[SelectorManager] = None,
        driver: Optional[NavigationDriver] = None,
        workflows: Optional[Dict[WorkflowType, BaseWorkflow]] = None,
    ):
        """
        Initialize the scraper service.

        Args:
            settings: Application settings (process singleton by default)
            session: Browser session manager
            queue: Serial execution queue
            cache: Response cache
            selectors: Selector catalogue
            driver: Navigation driver
            workflows: Workflow per type, for replacing individual flows
        """
        self.settings = settings if settings is not None else get_settings()
        self.sources: Dict[str, BookingSource] = self.settings.get_sources()
        if selectors is None:
            selectors = SelectorManager(self.settings.selectors_file)
        self.selectors = selectors
        if session is None:
            session = BrowserSessionManager(self.settings)
        self.session = session
        if queue is None:
            queue = SerialExecutionQueue(self.settings.queue_cooldown_seconds)
        self.queue = queue
        # ResponseCache defines __len__, so an empty injected cache is falsy
        if cache is None:
            cache = ResponseCache(self.settings.cache_ttls(), enabled=self.settings.cache_enabled)
        self.cache = cache
        if driver is None:
            driver = NavigationDriver(
                self.selectors, selector_timeout_ms=self.settings.selector_timeout_ms
            )
        self.driver = driver
        if workflows is None:
            workflows = {
                WorkflowType.ESPECIALIDADES: SpecialtiesWorkflow(
                    self.driver, self.selectors, self.settings
                ),
                WorkflowType.PROFESIONALES: PractitionersWorkflow(
                    self.driver, self.selectors, self.settings
                ),
                WorkflowType.HORAS: SlotsWorkflow(self.driver, self.selectors, self.settings),
            }
        self.workflows: Dict[WorkflowType, BaseWorkflow] = workflows
        self.started_at = datetime.now(timezone.utc)

    # Validation

    def list_sources(self) -> List[str]:
        return list(self.sources)

    def resolve_source(self, agenda: Optional[str]) -> BookingSource:
        """
        Look up a configured agenda.

        Raises:
            UnknownSourceError: If the key is missing or not configured
        """
        source = self.sources.get((agenda or "").strip().lower())
        if source is None:
            raise UnknownSourceError(agenda, self.sources)
        return source

    @staticmethod
    def _require(message: str, **values: Optional[str]) -> Dict[str, str]:
        missing = [name for name, value in values.items() if not (value or "").strip()]
        if missing:
            raise MissingParameterError(message, missing)
        return {name: (value or "").strip() for name, value in values.items()}

    # Operations

    async def get_specialties(self, agenda: Optional[str]) -> Dict[str, Any]:
        """Specialties offered by ``agenda``."""
        source = self.resolve_source(agenda)
        return await self._cached_run(
            WorkflowType.ESPECIALIDADES,
            ResponseCache.make_key(source.key),
            source,
            lambda items: specialties_payload(source.key, items),
        )

    async def get_practitioners(
        self, agenda: Optional[str], especialidad: Optional[str]
    ) -> Dict[str, Any]:
        """Practitioners of ``especialidad`` in ``agenda``."""
        source = self.resolve_source(agenda)
        params = self._require("Especialidad es requerida", especialidad=especialidad)
        return await self._cached_run(
            WorkflowType.PROFESIONALES,
            ResponseCache.make_key(source.key, params["especialidad"]),
            source,
            lambda items: practitioners_payload(source.key, params["especialidad"], items),
            **params,
        )

    async def get_slots(
        self,
        agenda: Optional[str],
        especialidad: Optional[str],
        profesional: Optional[str],
        fecha: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Bookable times of ``profesional``; ``fecha`` is echoed back and keys the cache."""
        source = self.resolve_source(agenda)
        params = self._require(
            "Especialidad y profesional son requeridos",
            especialidad=especialidad,
            profesional=profesional,
        )
        day = (fecha or "").strip() or None
        return await self._cached_run(
            WorkflowType.HORAS,
            ResponseCache.make_key(source.key, params["especialidad"], params["profesional"], day),
            source,
            lambda items: slots_payload(
                source.key, params["especialidad"], params["profesional"], items, fecha=day
            ),
            **params,
        )

    async def _cached_run(
        self,
        workflow: WorkflowType,
        key: str,
        source: BookingSource,
        build: PayloadBuilder,
        **params: str,
    ) -> Dict[str, Any]:
        cached = self.cache.get(workflow, key)
        if cached is not None:
            logger.info(f"{LogEmoji.RETRY} /api/{workflow.value} - returning cached result")
            return cached

        result: ScrapeResult = await self.queue.submit(
            lambda: self._run_workflow(workflow, source, **params),
            label=f"{workflow.value}:{source.key}",
        )
        if not result.success:
            logger.warning(f"{LogEmoji.WARNING} {workflow.value} on '{source.key}': {result.error}")
            return failure_payload(result.error or "Error desconocido", source.key)

        payload = build(result.items)
        self.cache.set(workflow, key, payload)
        return payload

    async def _run_workflow(
        self, workflow: WorkflowType, source: BookingSource, **params: str
    ) -> ScrapeResult:
        runner = self.workflows[workflow]
        started = time.monotonic()

        try:
            page = await self.session.new_page(block_resources=runner.block_resources)
        except PlaywrightError as e:
            await self.session.invalidate(str(e))
            raise BrowserSessionError(f"Could not open a page: {e}") from e

        try:
            result = await runner.execute(page, source, **params)
        except PlaywrightError as e:
            if is_browser_gone(e):
                await self.session.invalidate(str(e))
                raise BrowserSessionError(
                    f"Browser session lost during {workflow.value}: {e}",
                    details={"agenda": source.key},
                ) from e
            raise AutomationError(
                f"{workflow.value} failed: {e}", details={"agenda": source.key}
            ) from e
        finally:
            await self.session.release_page(page)
            self.session.record_completion()

        elapsed = time.monotonic() - started
        logger.info(
            f"{LogEmoji.SUCCESS} {workflow.value} on '{source.key}': "
            f"{len(result.items)} items in {elapsed:.1f}s (success={result.success})"
        )
        return result

    # Introspection

    def health(self) -> Dict[str, Any]:
        """Liveness snapshot with queue, browser and cache counters."""
        now = datetime.now(timezone.utc)
        return {
            "status": "ok",
            "timestamp": now.isoformat(),
            "service": self.settings.service_name,
            "version": __version__,
            "uptimeSeconds": int((now - self.started_at).total_seconds()),
            "requestCount": self.session.completed_since_recycle,
            "totalRequests": self.session.total_completed,
            "queueLength": self.queue.depth,
            "queue": self.queue.stats(),
            "browser": self.session.stats(),
            "cache": self.cache.stats(),
        }

    def info(self) -> Dict[str, Any]:
        """Service description served at the API root."""
        example = next(iter(self.sources), "agenda")
        return {
            "service": "Philaxmed Multi-Agenda API",
            "version": __version__,
            "agendas": self.list_sources(),
            "endpoints": {
                "health": "/health",
                "especialidades": f"/api/especialidades?agenda={example}",
                "profesionales": f"/api/profesionales?agenda={example}&especialidad=KINESIOLOGÍA",
                "horas": (
                    f"/api/horas?agenda={example}&especialidad=KINESIOLOGÍA&profesional=NOMBRE"
                ),
            },
            "status": "running",
            "queue": self.queue.depth,
        }

    async def shutdown(self) -> None:
        """Stop accepting jobs and close the browser."""
        logger.info(f"{LogEmoji.STOP} Shutting down agenda scraper")
        await self.queue.close()
        await self.session.close()
