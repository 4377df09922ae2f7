"""Click and wait primitives for driving the booking widget.

Every primitive reports "not found" as a return value instead of raising, so
workflows decide for themselves whether a missing element is fatal. Errors that
mean the page itself is gone (closed target, crashed browser) still propagate.
"""

import re
from typing import Any, Dict, List, Optional, Pattern, Union

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from agenda_scraper.constants import LogEmoji, Timeouts
from agenda_scraper.services.browser.session_manager import is_browser_gone
from agenda_scraper.utils.selectors import SelectorManager
from agenda_scraper.utils.text import normalize

_JS_NORMALIZE = """
    const norm = (s) => (s == null ? '' : String(s))
        .toLowerCase()
        .normalize('NFD')
        .replace(/[\\u0300-\\u036f]/g, '')
        .replace(/\\s+/g, ' ')
        .trim();
"""

# Broad scan: smallest element whose text equals or contains the target.
_CLICK_BY_TEXT_JS = (
    "({ target, selector, marker }) => {"
    + _JS_NORMALIZE
    + """
    const wanted = norm(target);
    if (!wanted) return null;
    const wantedMarker = norm(marker);
    const textOf = (n) => norm(n.innerText || n.textContent);
    const matches = Array.from(document.querySelectorAll(selector))
        .map((n) => ({ n, t: textOf(n) }))
        .filter(({ t }) => t && (t === wanted || t.includes(wanted)));
    if (!matches.length) return null;
    let pool = matches;
    if (wantedMarker) {
        const marked = matches.filter(({ t }) => t.includes(wantedMarker));
        if (marked.length) pool = marked;
    }
    const exact = pool.filter(({ t }) => t === wanted);
    if (exact.length) pool = exact;
    pool.sort((a, b) => a.t.length - b.t.length);
    const el = pool[0].n;
    el.scrollIntoView({ block: 'center' });
    el.click();
    return pool[0].t.slice(0, 120);
}"""
)

# Container click: match title or text, then click the first clickable child.
_CLICK_IN_CONTAINER_JS = (
    "({ target, selector, clickable }) => {"
    + _JS_NORMALIZE
    + """
    const wanted = norm(target);
    if (!wanted) return null;
    const items = Array.from(document.querySelectorAll(selector));
    const titleOf = (n) => norm(n.getAttribute('title'));
    const textOf = (n) => norm(n.innerText || n.textContent);
    const el = items.find((n) => titleOf(n) === wanted || textOf(n) === wanted)
        || items.find((n) => titleOf(n).includes(wanted) || textOf(n).includes(wanted));
    if (!el) return null;
    const hit = el.querySelector(clickable) || el;
    hit.scrollIntoView({ block: 'center' });
    hit.click();
    return (el.getAttribute('title') || el.innerText || el.textContent || '').trim().slice(0, 120);
}"""
)

_BODY_TEXT_JS = "() => (document.body ? document.body.innerText : '')"

_COLLECT_ELEMENTS_JS = """(selector) => Array.from(document.querySelectorAll(selector)).map((el) => ({
    text: (el.innerText || el.textContent || '').trim(),
    title: (el.getAttribute('title') || '').trim(),
    value: (el.getAttribute('data-value') || '').trim(),
}))"""

_BODY_MATCHES_JS = """({ source, flags }) => {
    const body = document.body ? document.body.innerText : '';
    return new RegExp(source, flags).test(body);
}"""


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath 1.0 string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZÁÉÍÓÚÜÑ"
_LOWER = "abcdefghijklmnopqrstuvwxyzáéíóúüñ"


def text_xpath(text: str, tags: tuple = ("button", "a")) -> str:
    """XPath matching ``tags`` whose case-folded text contains ``text``."""
    needle = xpath_literal(" ".join(text.lower().split()))
    folded = f"translate(normalize-space(.), '{_UPPER}', '{_LOWER}')"
    return " | ".join(f"//{tag}[contains({folded}, {needle})]" for tag in tags)


class NavigationDriver:
    """Sequencing primitives shared by all workflows."""

    def __init__(
        self,
        selectors: Optional[SelectorManager] = None,
        click_timeout_ms: int = Timeouts.CLICK,
        selector_timeout_ms: int = Timeouts.SELECTOR_WAIT,
    ):
        """
        Initialize navigation driver.

        Args:
            selectors: Selector catalogue (defaults to config/selectors.yaml)
            click_timeout_ms: Time allowed for the structural lookup of a click target
            selector_timeout_ms: Default wait for container selectors
        """
        self.selectors = selectors if selectors is not None else SelectorManager()
        self.click_timeout_ms = click_timeout_ms
        self.selector_timeout_ms = selector_timeout_ms

    @property
    def clickable_selector(self) -> str:
        return self.selectors.get("navigation.clickable", "button, a") or "button, a"

    @property
    def broad_selector(self) -> str:
        return (
            self.selectors.get("navigation.broad_scan", "div, li, span, button, a")
            or "div, li, span, button, a"
        )

    async def _scan_and_click(self, page: Page, script: str, arg: Dict[str, str]) -> Optional[str]:
        """Run a DOM click scan; a page that re-rendered mid-scan counts as not found."""
        try:
            return await page.evaluate(script, arg)
        except PlaywrightError as e:
            if is_browser_gone(e):
                raise
            logger.debug(f"DOM scan for '{arg.get('target')}' failed: {e}")
            return None

    async def click_by_visible_text(
        self, page: Page, text: str, timeout_ms: Optional[int] = None
    ) -> bool:
        """
        Click a button or link by its visible label.

        Tries a structural XPath lookup first, then falls back to a scan of
        every button and link comparing normalized text (accent-insensitive).

        Args:
            page: Playwright page
            text: Visible label, compared case-insensitively
            timeout_ms: Wait for the structural lookup

        Returns:
            True if something was clicked
        """
        timeout = timeout_ms or self.click_timeout_ms
        locator = page.locator(f"xpath={text_xpath(text)}").first
        try:
            await locator.wait_for(state="visible", timeout=timeout)
            await locator.scroll_into_view_if_needed(timeout=timeout)
            await locator.click(timeout=timeout)
            logger.debug(f"{LogEmoji.CLICK} Clicked '{text}' via structural lookup")
            return True
        except PlaywrightTimeoutError:
            logger.debug(f"Structural lookup for '{text}' timed out, scanning DOM")
        except PlaywrightError as e:
            if is_browser_gone(e):
                raise
            logger.debug(f"Structural lookup for '{text}' failed ({e}), scanning DOM")

        clicked = await self._scan_and_click(
            page,
            _CLICK_BY_TEXT_JS,
            {"target": text, "selector": self.clickable_selector, "marker": ""},
        )
        if clicked:
            logger.debug(f"{LogEmoji.CLICK} Clicked '{text}' via DOM scan")
            return True

        logger.debug(f"No clickable element found for '{text}'")
        return False

    async def click_in_container_by_text(
        self,
        page: Page,
        container_selector: str,
        text: str,
        timeout_ms: Optional[int] = None,
    ) -> bool:
        """
        Click the element inside ``container_selector`` whose title or text matches.

        Args:
            page: Playwright page
            container_selector: CSS selector group for candidate elements
            text: Target label
            timeout_ms: Wait for the container to appear

        Returns:
            True if something was clicked
        """
        timeout = timeout_ms or self.selector_timeout_ms
        try:
            await page.wait_for_selector(container_selector, timeout=timeout)
        except PlaywrightTimeoutError:
            logger.debug(f"Container '{container_selector}' never appeared")
            return False

        clicked = await self._scan_and_click(
            page,
            _CLICK_IN_CONTAINER_JS,
            {
                "target": text,
                "selector": container_selector,
                "clickable": self.clickable_selector,
            },
        )
        if clicked:
            logger.debug(f"{LogEmoji.CLICK} Clicked '{clicked}' in '{container_selector}'")
            return True
        return False

    async def click_any_by_text(
        self,
        page: Page,
        text: str,
        selector: Optional[str] = None,
        prefer_marker: Optional[str] = None,
    ) -> bool:
        """
        Click the smallest element anywhere in the page whose text matches.

        Args:
            page: Playwright page
            text: Target label
            selector: Elements to scan (defaults to the broad scan group)
            prefer_marker: When some matches also contain this text, only
                those are considered

        Returns:
            True if something was clicked
        """
        clicked = await self._scan_and_click(
            page,
            _CLICK_BY_TEXT_JS,
            {
                "target": text,
                "selector": selector or self.broad_selector,
                "marker": prefer_marker or "",
            },
        )
        if clicked:
            logger.debug(f"{LogEmoji.CLICK} Clicked '{clicked}' via broad scan")
            return True
        logger.debug(f"Broad scan found nothing matching '{normalize(text)}'")
        return False

    async def wait_for_content_settle(
        self,
        page: Page,
        selector_or_pattern: Union[str, Pattern[str]],
        timeout_ms: Optional[int] = None,
    ) -> bool:
        """
        Wait until a selector is attached or the body text matches a pattern.

        Args:
            page: Playwright page
            selector_or_pattern: CSS selector, or compiled regex tested
                against document.body.innerText
            timeout_ms: Maximum wait

        Returns:
            True if the condition was met before the timeout
        """
        timeout = timeout_ms or self.selector_timeout_ms
        try:
            if isinstance(selector_or_pattern, re.Pattern):
                flags = "i" if selector_or_pattern.flags & re.IGNORECASE else ""
                await page.wait_for_function(
                    _BODY_MATCHES_JS,
                    arg={"source": selector_or_pattern.pattern, "flags": flags},
                    timeout=timeout,
                )
            else:
                await page.wait_for_selector(selector_or_pattern, timeout=timeout)
            return True
        except PlaywrightTimeoutError:
            target = getattr(selector_or_pattern, "pattern", selector_or_pattern)
            logger.debug(f"{LogEmoji.WAITING} Content did not settle on '{target}' in {timeout}ms")
            return False

    async def pause(self, page: Page, ms: int) -> None:
        """Fixed stabilization delay between UI transitions."""
        await page.wait_for_timeout(ms)

    async def read_body_text(self, page: Page) -> str:
        """Rendered text of the whole page."""
        text = await page.evaluate(_BODY_TEXT_JS)
        return text or ""

    async def collect_elements(self, page: Page, selector: str) -> List[Dict[str, Any]]:
        """Text, title and data-value of every element matching ``selector``."""
        items = await page.evaluate(_COLLECT_ELEMENTS_JS, selector)
        return list(items or [])
