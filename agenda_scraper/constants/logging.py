"""Logging-related constants."""

from typing import Final


class LogEmoji:
    """Emoji constants for consistent logging."""

    SUCCESS: Final[str] = "✅"
    ERROR: Final[str] = "❌"
    WARNING: Final[str] = "⚠️"
    DEBUG: Final[str] = "🔍"
    START: Final[str] = "🚀"
    STOP: Final[str] = "🛑"
    PROCESSING: Final[str] = "⚙️"
    WAITING: Final[str] = "⏳"
    RETRY: Final[str] = "🔄"
    FOUND: Final[str] = "🎯"
    CACHE: Final[str] = "💾"
    QUEUE: Final[str] = "📥"
    BROWSER: Final[str] = "🌐"
    CLICK: Final[str] = "👆"
    CALENDAR: Final[str] = "📅"
