"""Pytest configuration and common fixtures."""

import os
import sys
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Try to load test-specific environment file if it exists
test_env_file = Path(__file__).parent / ".env.test"
if test_env_file.exists():
    load_dotenv(test_env_file)

# Set environment variables BEFORE any agenda_scraper imports
os.environ.setdefault("ENV", "testing")

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

# NOW it's safe to import from agenda_scraper
import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agenda_scraper.core.config.settings import ScraperSettings, reset_settings
from agenda_scraper.services.navigation import driver as driver_module
from agenda_scraper.utils.selectors import SelectorManager
from agenda_scraper.utils.text import normalize

SELECTORS_FILE = Path(__file__).parent.parent / "config" / "selectors.yaml"


def pytest_configure(config):
    """Configure pytest environment before tests run."""
    warnings.filterwarnings("ignore", message="coroutine.*was never awaited")
    warnings.filterwarnings("ignore", category=pytest.PytestUnraisableExceptionWarning)


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch):
    """Automatically set up test environment for all tests."""
    monkeypatch.setenv("ENV", "testing")
    monkeypatch.delenv("AGENDA_SOURCES", raising=False)
    reset_settings()
    yield
    reset_settings()


class FakeLocator:
    """Locator whose lookup succeeds only for labels the page shows as buttons."""

    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    @property
    def first(self) -> "FakeLocator":
        return self

    def _label(self) -> Optional[str]:
        for label in self.page.buttons:
            if f"'{label.lower()}'" in self.selector or f'"{label.lower()}"' in self.selector:
                return label
        return None

    async def wait_for(self, state: str = "visible", timeout: Optional[int] = None) -> None:
        if self._label() is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def scroll_into_view_if_needed(self, timeout: Optional[int] = None) -> None:
        return None

    async def click(self, timeout: Optional[int] = None) -> None:
        label = self._label()
        if label is None:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded clicking {self.selector}")
        self.page.record_click(label)


class FakePage:
    """
    Minimal stand-in for a Playwright page.

    ``buttons`` are labels reachable by the structural button/link lookup,
    ``clickable`` are labels only the DOM scan finds, ``elements`` maps a CSS
    selector group to element snapshots and ``body_text`` is the rendered text.
    ``on_click`` can swap the page content when a label is clicked.
    """

    def __init__(
        self,
        body_text: str = "",
        elements: Optional[Dict[str, List[Dict[str, str]]]] = None,
        buttons: Optional[List[str]] = None,
        clickable: Optional[List[str]] = None,
        selectors_present: Optional[List[str]] = None,
        goto_error: Optional[Exception] = None,
    ):
        self.body_text = body_text
        self.elements = elements or {}
        self.buttons = list(buttons or [])
        self.clickable = list(clickable or [])
        self.selectors_present = set(selectors_present or [])
        self.goto_error = goto_error
        self.on_click: Dict[str, Callable[["FakePage"], None]] = {}
        self.clicks: List[str] = []
        self.visited: List[str] = []
        self.listeners: Dict[str, List[Callable]] = {}
        self.routes: List[Any] = []
        self.pauses: List[int] = []
        self.context = MagicMock()
        self.context.close = AsyncMock()

    def record_click(self, label: str) -> None:
        self.clicks.append(label)
        callback = self.on_click.get(label)
        if callback:
            callback(self)

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[int] = None):
        if self.goto_error is not None:
            raise self.goto_error
        self.visited.append(url)

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None):
        parts = {p.strip() for p in selector.split(",")}
        if parts & self.selectors_present or selector in self.elements:
            return MagicMock()
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    async def wait_for_timeout(self, ms: int) -> None:
        self.pauses.append(ms)

    async def wait_for_function(self, expression: str, arg: Any = None, timeout: Optional[int] = None):
        import re

        if arg and re.search(arg["source"], self.body_text):
            return True
        raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for function")

    def locator(self, selector: str) -> FakeLocator:
        return FakeLocator(self, selector)

    def _scan(self, target: str, candidates: List[str], marker: str = "") -> Optional[str]:
        wanted = normalize(target)
        matches = [c for c in candidates if wanted and wanted in normalize(c)]
        if marker:
            marked = [c for c in matches if normalize(marker) in normalize(c)]
            matches = marked or matches
        return min(matches, key=len) if matches else None

    async def evaluate(self, expression: str, arg: Any = None) -> Any:
        if expression == driver_module._BODY_TEXT_JS:
            return self.body_text
        if expression == driver_module._COLLECT_ELEMENTS_JS:
            return self.elements.get(arg, [])
        if expression == driver_module._CLICK_BY_TEXT_JS:
            hit = self._scan(arg["target"], self.buttons + self.clickable, arg.get("marker", ""))
        elif expression == driver_module._CLICK_IN_CONTAINER_JS:
            items = self.elements.get(arg["selector"], [])
            labels = [i.get("title") or i.get("text", "") for i in items]
            hit = self._scan(arg["target"], labels)
        else:
            raise AssertionError(f"Unexpected evaluate call: {expression[:60]}")
        if hit is None:
            return None
        self.record_click(hit)
        return hit

    def on(self, event: str, handler: Callable) -> None:
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler: Callable) -> None:
        self.listeners[event].remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for handler in list(self.listeners.get(event, [])):
            handler(payload)

    async def route(self, pattern: str, handler: Callable) -> None:
        self.routes.append((pattern, handler))

    async def close(self) -> None:
        return None


class FakeBrowser:
    """Browser double handing out FakePage instances."""

    def __init__(self, pages: Optional[List[FakePage]] = None):
        self._pages = list(pages or [])
        self.connected = True
        self.closed = False
        self.contexts: List[MagicMock] = []

    def is_connected(self) -> bool:
        return self.connected and not self.closed

    async def new_context(self, **options: Any) -> MagicMock:
        context = MagicMock()
        context.options = options
        context.close = AsyncMock()
        page = self._pages.pop(0) if self._pages else FakePage()
        page.context = context
        context.new_page = AsyncMock(return_value=page)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def test_settings() -> ScraperSettings:
    """Settings with short timeouts and no cooldown."""
    return ScraperSettings(
        env="testing",
        selectors_file=str(SELECTORS_FILE),
        queue_cooldown_seconds=0,
        navigation_timeout_ms=1000,
        selector_timeout_ms=100,
        response_timeout_ms=100,
        slot_pattern_timeout_ms=100,
    )


@pytest.fixture
def selectors() -> SelectorManager:
    return SelectorManager(SELECTORS_FILE)


@pytest.fixture
def fake_page_factory():
    """Build FakePage instances."""
    return FakePage


@pytest.fixture
def launcher_factory():
    """Return (launcher, browsers): each launcher call creates and records a FakeBrowser."""

    def make(pages: Optional[List[FakePage]] = None):
        browsers: List[FakeBrowser] = []

        async def launch() -> FakeBrowser:
            browser = FakeBrowser(pages if not browsers else None)
            browsers.append(browser)
            return browser

        return AsyncMock(side_effect=launch), browsers

    return make
