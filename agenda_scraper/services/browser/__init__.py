"""Browser lifecycle and page event handling."""

from .page_events import PageEvent, PageEventHub, attach_diagnostics
from .session_manager import BrowserSessionManager, is_browser_gone

__all__ = [
    "BrowserSessionManager",
    "PageEvent",
    "PageEventHub",
    "attach_diagnostics",
    "is_browser_gone",
]
