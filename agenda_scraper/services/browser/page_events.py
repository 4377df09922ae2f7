"""Typed page event subscriptions with explicit teardown."""

from enum import Enum
from typing import Any, Callable, List, Tuple

from loguru import logger
from playwright.async_api import Page


class PageEvent(str, Enum):
    """Playwright page events the scraper listens to."""
    CONSOLE = "console"
    PAGE_ERROR = "pageerror"
    REQUEST_FAILED = "requestfailed"
    RESPONSE = "response"


Handler = Callable[[Any], Any]


class PageEventHub:
    """
    Registers listeners on one page and removes all of them on close.

    Pages are released after every workflow, but listeners must still be
    detached so a handler never fires for a workflow that already returned.
    Usable as a context manager.
    """

    def __init__(self, page: Page):
        self.page = page
        self._subscriptions: List[Tuple[PageEvent, Handler]] = []

    def subscribe(self, event: PageEvent, handler: Handler) -> Callable[[], None]:
        """
        Attach ``handler`` to ``event``.

        Returns:
            Callable that removes this single subscription
        """
        self.page.on(event.value, handler)
        entry = (event, handler)
        self._subscriptions.append(entry)

        def unsubscribe() -> None:
            if entry in self._subscriptions:
                self._subscriptions.remove(entry)
                self._detach(event, handler)

        return unsubscribe

    def _detach(self, event: PageEvent, handler: Handler) -> None:
        try:
            self.page.remove_listener(event.value, handler)
        except Exception as e:
            logger.debug(f"Could not remove {event.value} listener: {e}")

    @property
    def active(self) -> int:
        return len(self._subscriptions)

    def close(self) -> None:
        """Remove every listener registered through this hub."""
        while self._subscriptions:
            event, handler = self._subscriptions.pop()
            self._detach(event, handler)

    def __enter__(self) -> "PageEventHub":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def attach_diagnostics(hub: PageEventHub, label: str) -> None:
    """Log browser console output, page errors and failed requests at debug level."""

    def on_console(message: Any) -> None:
        logger.debug(f"[{label}] console.{message.type}: {message.text}")

    def on_page_error(error: Any) -> None:
        logger.debug(f"[{label}] page error: {error}")

    def on_request_failed(request: Any) -> None:
        failure = request.failure
        logger.debug(f"[{label}] request failed: {request.url} ({failure})")

    hub.subscribe(PageEvent.CONSOLE, on_console)
    hub.subscribe(PageEvent.PAGE_ERROR, on_page_error)
    hub.subscribe(PageEvent.REQUEST_FAILED, on_request_failed)
