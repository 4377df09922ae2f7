"""Process infrastructure: shutdown handling."""

from .shutdown import SHUTDOWN_TIMEOUT, graceful_shutdown

__all__ = ["SHUTDOWN_TIMEOUT", "graceful_shutdown"]
