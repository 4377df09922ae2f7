"""Core infrastructure module."""

from .exceptions import (
    AgendaScraperError,
    AutomationError,
    BrowserLaunchError,
    BrowserSessionError,
    ConfigurationError,
    MissingParameterError,
    NavigationTimeoutError,
    QueueClosedError,
    RequestValidationError,
    UnknownSourceError,
)

__all__ = [
    "AgendaScraperError",
    "AutomationError",
    "BrowserLaunchError",
    "BrowserSessionError",
    "ConfigurationError",
    "MissingParameterError",
    "NavigationTimeoutError",
    "QueueClosedError",
    "RequestValidationError",
    "UnknownSourceError",
]
