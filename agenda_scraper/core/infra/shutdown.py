"""Graceful shutdown of long-lived resources."""

import asyncio
import os
from typing import Awaitable, Callable

from loguru import logger

from agenda_scraper.constants import LogEmoji, Timeouts

# Graceful shutdown timeout in seconds (configurable via env)
try:
    SHUTDOWN_TIMEOUT = max(1, min(int(os.getenv("SHUTDOWN_TIMEOUT", "10")), 120))
except (ValueError, TypeError):
    SHUTDOWN_TIMEOUT = Timeouts.GRACEFUL_SHUTDOWN_SECONDS


async def graceful_shutdown(
    close: Callable[[], Awaitable[None]], name: str, timeout: float = SHUTDOWN_TIMEOUT
) -> bool:
    """
    Await ``close()`` with a deadline.

    Errors are logged rather than raised so the remaining shutdown steps run.

    Args:
        close: Coroutine function releasing the resource
        name: Resource name for logs
        timeout: Seconds to wait

    Returns:
        True if the resource closed cleanly in time
    """
    try:
        await asyncio.wait_for(close(), timeout=timeout)
        logger.info(f"{LogEmoji.SUCCESS} {name} closed")
        return True
    except asyncio.TimeoutError:
        logger.error(f"{LogEmoji.ERROR} {name} close timed out after {timeout}s")
    except Exception as e:
        logger.error(f"{LogEmoji.ERROR} Error closing {name}: {e}")
    return False
