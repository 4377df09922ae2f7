"""Selector catalogue loaded from YAML."""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from loguru import logger
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError


class SelectorManager:
    """Manage CSS selectors and UI labels from external configuration."""

    def __init__(self, selectors_file: Union[str, Path] = "config/selectors.yaml"):
        """
        Initialize selector manager.

        Args:
            selectors_file: Path to selectors YAML file
        """
        self.selectors_file = Path(selectors_file)
        self._selectors: Dict[str, Any] = {}
        self._load_selectors()

    def _load_selectors(self) -> None:
        """Load selectors from YAML file."""
        if not self.selectors_file.exists():
            logger.warning(f"Selectors file not found: {self.selectors_file}, using defaults")
            self._selectors = self._get_default_selectors()
            return

        try:
            with open(self.selectors_file, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load selectors: {e}")
            logger.info("Falling back to default selectors")
            self._selectors = self._get_default_selectors()
            return

        if not isinstance(loaded, dict):
            logger.error(f"Selectors file {self.selectors_file} is not a mapping, using defaults")
            self._selectors = self._get_default_selectors()
            return

        self._selectors = loaded
        version = self._selectors.get("version", "unknown")
        logger.info(f"Selectors loaded (version: {version})")

    def _lookup(self, path: str) -> Any:
        value: Any = self._selectors
        for key in path.split("."):
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return None
        return value

    def get(self, path: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get selector by dot-notation path.

        Args:
            path: Dot-separated path (e.g., "entry.widget")
            default: Default value if not found

        Returns:
            Selector string (the primary one for structured entries) or default
        """
        return self._get_cached(path, default)

    @lru_cache(maxsize=128)
    def _get_cached(self, path: str, default: Optional[str] = None) -> Optional[str]:
        value = self._lookup(path)
        if value is None:
            logger.warning(f"Selector not found: {path}, using default: {default}")
            return default

        if isinstance(value, dict) and "primary" in value:
            primary = value["primary"]
            return primary if isinstance(primary, str) else default

        return value if isinstance(value, str) else default

    def get_fallbacks(self, path: str) -> List[str]:
        """
        Get fallback selectors for a given path.

        Args:
            path: Dot-separated path

        Returns:
            List of fallback selectors (without primary)
        """
        value = self._lookup(path)
        if isinstance(value, dict) and "fallbacks" in value:
            fallbacks = value["fallbacks"]
            if isinstance(fallbacks, list):
                return [str(f) for f in fallbacks]
            return [str(fallbacks)]
        return []

    def get_with_fallback(self, path: str) -> List[str]:
        """
        Get selector with fallback options.

        Args:
            path: Dot-separated path

        Returns:
            List of selectors to try, primary first
        """
        selectors = []
        primary = self.get(path)
        if primary:
            selectors.append(primary)
        selectors.extend(s for s in self.get_fallbacks(path) if s not in selectors)
        return selectors

    def get_group(self, path: str) -> str:
        """Primary and fallbacks joined into one CSS selector group."""
        return ", ".join(self.get_with_fallback(path))

    async def wait_for_any(self, page: Page, path: str, timeout: int = 10000) -> Optional[str]:
        """
        Wait until any selector of ``path`` is attached to the page.

        Args:
            page: Playwright page object
            path: Selector path
            timeout: Timeout in milliseconds

        Returns:
            The selector group that matched, or None on timeout
        """
        group = self.get_group(path)
        if not group:
            return None
        try:
            await page.wait_for_selector(group, timeout=timeout)
            return group
        except PlaywrightTimeoutError as e:
            logger.debug(f"Selector group '{path}' not found ({group}): {e}")
            return None

    def reload(self) -> None:
        """Reload selectors from file."""
        self._get_cached.cache_clear()
        self._load_selectors()
        logger.info("Selectors reloaded")

    @staticmethod
    def _get_default_selectors() -> Dict[str, Any]:
        """Built-in selectors matching the shipped YAML catalogue."""
        return {
            "version": "default",
            "entry": {
                "widget": {"primary": ".cellWidget", "fallbacks": [".especialidad", ".service-item"]},
                "booking_text": "reservar hora",
                "specialty_mode_text": "por especialidad",
            },
            "specialties": {
                "list_ready": ".cellWidget",
                "clickable": {
                    "primary": ".cellWidget",
                    "fallbacks": [".especialidad", ".service-item"],
                },
                "items": {
                    "primary": ".cellWidget",
                    "fallbacks": [".especialidad", ".service-item", ".item"],
                },
            },
            "practitioners": {
                "cards": {
                    "primary": ".profesional",
                    "fallbacks": [".medico", ".practitioner", ".list-item", ".item"],
                },
                "specialty_marker": "especialidad:",
            },
            "navigation": {
                "broad_scan": "div, li, span, button, a",
                "clickable": "button, a",
            },
            "slots": {"application_url": "/onlinebooking/application"},
        }

