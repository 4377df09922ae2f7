"""Constants for the agenda scraper.

All classes can be imported directly from this package:
    from agenda_scraper.constants import Timeouts, Delays, CacheTTL
"""

from .logging import LogEmoji
from .timing import BrowserDefaults, CacheTTL, Delays, Timeouts

__all__ = [
    "BrowserDefaults",
    "CacheTTL",
    "Delays",
    "LogEmoji",
    "Timeouts",
]
