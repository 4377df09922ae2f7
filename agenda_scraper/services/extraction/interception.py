"""Capture of the booking application's background responses."""

import asyncio
import json
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Set

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Response

from agenda_scraper.services.browser.page_events import PageEvent, PageEventHub

_SLOT_URL_RE = re.compile(
    r"hora|horas|slot|available|availability|getavailable|reserva|agenda|timeslot|getslots|disponible",
    re.IGNORECASE,
)
_XHR_TYPES = frozenset({"xhr", "fetch"})


@dataclass
class CapturedResponse:
    """Body of one background response, decoded when it was JSON."""

    url: str
    status: int
    body: Any
    is_json: bool
    sequence: int


class ResponseRecorder:
    """
    Records XHR/fetch responses that may carry slot data.

    JSON responses are always kept. Other bodies are kept as text when they
    come from the booking application endpoint or from a URL that looks
    slot-related. Call ``arm()`` right before the click that should trigger the
    slot request; ``wait_for_application()`` and ``since_armed()`` then only
    consider responses that arrived afterwards.
    """

    def __init__(self, application_fragment: str = "/onlinebooking/application"):
        self.application_fragment = application_fragment.lower()
        self.captured: List[CapturedResponse] = []
        self._pending: Set[asyncio.Task] = set()
        self._sequence = 0
        self._armed_at = 0
        self._application_seen = asyncio.Event()

    def attach(self, hub: PageEventHub) -> None:
        hub.subscribe(PageEvent.RESPONSE, self._on_response)

    def arm(self) -> None:
        """Only responses from now on count as slot responses."""
        self._armed_at = self._sequence
        self._application_seen.clear()

    def _is_application(self, url: str) -> bool:
        return self.application_fragment in url.lower()

    def _on_response(self, response: Response) -> None:
        try:
            resource_type = response.request.resource_type
        except PlaywrightError:
            return
        if resource_type not in _XHR_TYPES:
            return
        task = asyncio.create_task(self._capture(response))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _capture(self, response: Response) -> None:
        url = response.url
        content_type = (response.headers.get("content-type") or "").lower()
        is_json = "json" in content_type
        is_application = self._is_application(url)
        if not (is_json or is_application or _SLOT_URL_RE.search(url)):
            return

        try:
            text = await response.text()
        except PlaywrightError as e:
            logger.debug(f"Could not read response body from {url}: {e}")
            return

        body: Any = text
        stripped = text.lstrip()
        if is_json or stripped[:1] in ("{", "["):
            try:
                body = json.loads(text)
                is_json = True
            except ValueError:
                is_json = False

        self._sequence += 1
        self.captured.append(
            CapturedResponse(
                url=url,
                status=response.status,
                body=body,
                is_json=is_json,
                sequence=self._sequence,
            )
        )
        logger.debug(f"Captured {'JSON' if is_json else 'text'} response from {url}")
        if is_application:
            self._application_seen.set()

    def since_armed(self) -> List[CapturedResponse]:
        """Responses captured after ``arm()``, newest first."""
        recent = [c for c in self.captured if c.sequence > self._armed_at]
        return sorted(recent, key=lambda c: c.sequence, reverse=True)

    async def wait_for_application(self, timeout_ms: int) -> bool:
        """Wait for an application endpoint response captured after ``arm()``."""
        try:
            await asyncio.wait_for(self._application_seen.wait(), timeout=timeout_ms / 1000)
            return True
        except asyncio.TimeoutError:
            logger.debug(f"No application response within {timeout_ms}ms")
            return False

    async def settle(self, timeout_ms: Optional[int] = 5000) -> None:
        """Wait for body reads that are still in flight."""
        if not self._pending:
            return
        pending = list(self._pending)
        done, still_pending = await asyncio.wait(
            pending, timeout=(timeout_ms / 1000) if timeout_ms else None
        )
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.debug(f"Response capture failed: {task.exception()}")
        for task in still_pending:
            task.cancel()

    def discard(self) -> None:
        """Cancel body reads still in flight, for flows that end before ``settle()``."""
        for task in list(self._pending):
            task.cancel()

    @property
    def in_flight(self) -> int:
        return len(self._pending)
