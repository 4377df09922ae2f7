"""Shared headless browser lifecycle with periodic recycling."""

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

from loguru import logger
from playwright.async_api import Browser, Page, Playwright, Route, async_playwright

from agenda_scraper.constants import BrowserDefaults, LogEmoji, Timeouts
from agenda_scraper.core.config.settings import ScraperSettings
from agenda_scraper.core.exceptions import BrowserLaunchError

Launcher = Callable[[], Awaitable[Browser]]


class BrowserSessionManager:
    """
    Owns the single Chromium instance shared by every workflow.

    The browser is launched lazily on the first ``acquire()`` and relaunched
    once ``recycle_threshold`` workflows have completed on it, which bounds
    memory growth of a long-lived headless browser. Each workflow gets its own
    browser context (cookies, cache) through ``new_page()`` and must hand it
    back with ``release_page()``.
    """

    def __init__(
        self,
        settings: Optional[ScraperSettings] = None,
        launcher: Optional[Launcher] = None,
        recycle_threshold: Optional[int] = None,
    ):
        """
        Initialize browser session manager.

        Args:
            settings: Application settings (defaults are used when omitted)
            launcher: Coroutine factory returning a connected Browser; replaces
                the Playwright Chromium launch (used by tests)
            recycle_threshold: Override for settings.recycle_threshold
        """
        self.settings = settings if settings is not None else ScraperSettings()
        self.recycle_threshold: int = recycle_threshold or self.settings.recycle_threshold
        self._launcher: Launcher = launcher or self._launch_chromium
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._lock = asyncio.Lock()

        self._completed_since_recycle: int = 0
        self._total_completed: int = 0
        self._launch_count: int = 0

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser

    @property
    def completed_since_recycle(self) -> int:
        return self._completed_since_recycle

    @property
    def total_completed(self) -> int:
        return self._total_completed

    @property
    def launch_count(self) -> int:
        return self._launch_count

    def should_recycle(self) -> bool:
        """Check whether the current browser has served its quota of workflows."""
        return self._completed_since_recycle >= self.recycle_threshold

    async def acquire(self) -> Browser:
        """
        Return a live browser, launching or recycling as needed.

        Returns:
            Connected Browser handle

        Raises:
            BrowserLaunchError: If the browser cannot be started
        """
        async with self._lock:
            if self._browser is not None and self.should_recycle():
                logger.info(
                    f"{LogEmoji.RETRY} Recycling browser after "
                    f"{self._completed_since_recycle} completed workflows"
                )
                await self._discard_browser()

            if self._browser is not None:
                if self._browser.is_connected():
                    return self._browser
                logger.warning(f"{LogEmoji.WARNING} Browser disconnected, relaunching")
                await self._discard_browser()

            return await self._launch()

    async def _launch(self) -> Browser:
        logger.info(f"{LogEmoji.START} Launching headless browser")
        try:
            browser = await self._launcher()
        except Exception as e:
            logger.error(f"{LogEmoji.ERROR} Browser launch failed: {e}")
            raise BrowserLaunchError(f"Browser launch failed: {e}") from e

        self._browser = browser
        self._launch_count += 1
        self._completed_since_recycle = 0
        logger.info(f"{LogEmoji.SUCCESS} Browser launched (launch #{self._launch_count})")
        return browser

    async def _launch_chromium(self) -> Browser:
        if self._playwright is None:
            self._playwright = await async_playwright().start()
        return await self._playwright.chromium.launch(
            headless=self.settings.headless,
            args=list(self.settings.browser_args),
        )

    async def new_page(self, block_resources: bool = False) -> Page:
        """
        Open a page in a fresh browser context.

        Args:
            block_resources: Abort image, media and font requests

        Returns:
            New Page instance

        Raises:
            BrowserLaunchError: If the browser cannot be started
        """
        browser = await self.acquire()
        context = await browser.new_context(
            user_agent=self.settings.user_agent,
            viewport={
                "width": self.settings.viewport_width,
                "height": self.settings.viewport_height,
            },
            extra_http_headers={"Accept-Language": self.settings.accept_language},
        )
        try:
            page = await context.new_page()
            if block_resources:
                await page.route("**/*", _block_heavy_resources)
        except Exception:
            await _close_quietly(context, "context")
            raise
        return page

    async def release_page(self, page: Page) -> None:
        """Close the page's browser context; errors are logged and ignored."""
        await _close_quietly(page.context, "context")

    def record_completion(self) -> None:
        """Count one finished workflow toward the recycle threshold."""
        self._completed_since_recycle += 1
        self._total_completed += 1
        logger.debug(
            f"Workflow completed ({self._completed_since_recycle}/{self.recycle_threshold} "
            f"before recycle, {self._total_completed} total)"
        )

    async def invalidate(self, reason: str = "") -> None:
        """Drop the current browser so the next acquire() launches a new one."""
        if self._browser is None:
            return
        logger.warning(f"{LogEmoji.WARNING} Invalidating browser session: {reason or 'unknown'}")
        async with self._lock:
            await self._discard_browser()

    async def _discard_browser(self) -> None:
        browser, self._browser = self._browser, None
        self._completed_since_recycle = 0
        if browser is None:
            return
        try:
            await asyncio.wait_for(browser.close(), timeout=Timeouts.BROWSER_CLOSE_SECONDS)
            logger.debug("Browser closed")
        except asyncio.TimeoutError:
            logger.warning(f"Browser close timed out after {Timeouts.BROWSER_CLOSE_SECONDS}s")
        except Exception as e:
            logger.warning(f"Error closing browser (ignored): {e}")

    async def close(self) -> None:
        """Clean up browser resources."""
        await self._discard_browser()

        if self._playwright is not None:
            playwright, self._playwright = self._playwright, None
            try:
                await playwright.stop()
            except Exception as e:
                logger.warning(f"Error stopping Playwright (ignored): {e}")

        logger.info(f"{LogEmoji.STOP} Browser resources cleaned up")

    def stats(self) -> Dict[str, Any]:
        """Snapshot of session counters for health reporting."""
        return {
            "running": self._browser is not None,
            "launches": self._launch_count,
            "completed_since_recycle": self._completed_since_recycle,
            "total_completed": self._total_completed,
            "recycle_threshold": self.recycle_threshold,
        }

    async def __aenter__(self) -> "BrowserSessionManager":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def _block_heavy_resources(route: Route) -> None:
    if route.request.resource_type in BrowserDefaults.BLOCKED_RESOURCE_TYPES:
        await route.abort()
    else:
        await route.continue_()


async def _close_quietly(closable: Any, label: str) -> None:
    if closable is None:
        return
    try:
        await closable.close()
    except Exception as e:
        logger.debug(f"Ignoring error while closing {label}: {e}")


_GONE_MARKERS = (
    "target closed",
    "target page, context or browser has been closed",
    "browser has been closed",
    "browser has disconnected",
    "connection closed",
)


def is_browser_gone(error: BaseException) -> bool:
    """True when a Playwright error means the page or browser no longer exists."""
    message = str(error).lower()
    return any(marker in message for marker in _GONE_MARKERS)
