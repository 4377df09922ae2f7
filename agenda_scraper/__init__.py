"""Agenda scraper - headless-browser scraping of appointment booking widgets."""

import importlib as _importlib
from typing import TYPE_CHECKING, Any

__version__ = "4.2.0"

if TYPE_CHECKING:
    from .core.config.settings import ScraperSettings as ScraperSettings
    from .core.config.settings import get_settings as get_settings
    from .core.logger import setup_structured_logging as setup_structured_logging
    from .services.browser.session_manager import BrowserSessionManager as BrowserSessionManager
    from .services.cache.response_cache import ResponseCache as ResponseCache
    from .services.navigation.driver import NavigationDriver as NavigationDriver
    from .services.queue.serial_queue import SerialExecutionQueue as SerialExecutionQueue
    from .services.scraper_service import AgendaScraperService as AgendaScraperService
    from .utils.text import normalize as normalize

# Explicit lazy-loading map: name -> (module_path, attribute_name)
_LAZY_MODULE_MAP = {
    "ScraperSettings": ("agenda_scraper.core.config.settings", "ScraperSettings"),
    "get_settings": ("agenda_scraper.core.config.settings", "get_settings"),
    "setup_structured_logging": ("agenda_scraper.core.logger", "setup_structured_logging"),
    "BrowserSessionManager": (
        "agenda_scraper.services.browser.session_manager",
        "BrowserSessionManager",
    ),
    "ResponseCache": ("agenda_scraper.services.cache.response_cache", "ResponseCache"),
    "NavigationDriver": ("agenda_scraper.services.navigation.driver", "NavigationDriver"),
    "SerialExecutionQueue": ("agenda_scraper.services.queue.serial_queue", "SerialExecutionQueue"),
    "AgendaScraperService": ("agenda_scraper.services.scraper_service", "AgendaScraperService"),
    "normalize": ("agenda_scraper.utils.text", "normalize"),
}

__all__ = ["__version__", *_LAZY_MODULE_MAP]


def __getattr__(name: str) -> Any:
    """Lazily import public names so importing the package stays cheap."""
    if name in _LAZY_MODULE_MAP:
        module_path, attr = _LAZY_MODULE_MAP[name]
        module = _importlib.import_module(module_path)
        value = getattr(module, attr)
        globals()[name] = value
        return value
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
