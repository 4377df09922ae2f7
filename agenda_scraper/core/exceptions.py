"""Custom exception classes for the agenda scraper."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional


class AgendaScraperError(Exception):
    """Base exception for the agenda scraper."""

    http_status: int = 500

    def __init__(
        self, message: str, recoverable: bool = True, details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize agenda scraper error.

        Args:
            message: Error message
            recoverable: Whether the error is recoverable with retry
            details: Additional error details
        """
        self.message = message
        self.recoverable = recoverable
        self.details = details or {}
        self.timestamp = datetime.now(timezone.utc).isoformat()
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "details": self.details,
            "timestamp": self.timestamp,
        }


class RequestValidationError(AgendaScraperError):
    """Request parameters were rejected before any browser work."""

    http_status = 400

    def __init__(self, message: str = "Invalid request", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, recoverable=False, details=details)


class UnknownSourceError(RequestValidationError):
    """Agenda key is not one of the configured booking sources."""

    def __init__(self, key: Optional[str], known: Iterable[str]):
        """
        Initialize unknown source error.

        Args:
            key: Agenda key received from the caller
            known: Configured agenda keys
        """
        self.key = key
        self.known: List[str] = list(known)
        message = f"Agenda no válida. Opciones: {', '.join(self.known)}"
        super().__init__(message, details={"agenda": key, "options": self.known})


class MissingParameterError(RequestValidationError):
    """A required query parameter was missing or blank."""

    def __init__(self, message: str, parameters: Optional[List[str]] = None):
        self.parameters = parameters or []
        super().__init__(message, details={"parameters": self.parameters})


class ConfigurationError(AgendaScraperError):
    """Configuration error."""

    def __init__(self, message: str = "Configuration error"):
        super().__init__(message, recoverable=False)


class AutomationError(AgendaScraperError):
    """Infrastructure failure while driving the browser."""

    def __init__(
        self,
        message: str = "Browser automation failed",
        recoverable: bool = True,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, recoverable, details)


class BrowserLaunchError(AutomationError):
    """Headless browser could not be started."""

    def __init__(self, message: str = "Browser launch failed"):
        super().__init__(message, recoverable=True)


class BrowserSessionError(AutomationError):
    """Browser or page died while a workflow was running."""

    def __init__(self, message: str = "Browser session lost", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, recoverable=True, details=details)


class NavigationTimeoutError(AutomationError):
    """Booking source did not load within the navigation timeout."""

    http_status = 504

    def __init__(self, url: str, timeout_ms: Optional[int] = None):
        """
        Initialize navigation timeout error.

        Args:
            url: URL that failed to load
            timeout_ms: Timeout that was exceeded, in milliseconds
        """
        self.url = url
        message = f"Timeout loading {url}"
        if timeout_ms:
            message += f" after {timeout_ms}ms"
        super().__init__(message, recoverable=True, details={"url": url, "timeout_ms": timeout_ms})


class QueueClosedError(AgendaScraperError):
    """Job submitted to, or pending on, a queue that is shutting down."""

    http_status = 503

    def __init__(self, message: str = "Execution queue is closed"):
        super().__init__(message, recoverable=False)
