"""Timing-related constants (timeouts, delays, cache lifetimes)."""

from typing import Final


class Timeouts:
    """Timeout values - MILLISECONDS for Playwright, SECONDS noted separately."""

    # Playwright timeouts (milliseconds)
    NAVIGATION: Final[int] = 60_000
    ENTRY_WIDGET: Final[int] = 20_000
    SELECTOR_WAIT: Final[int] = 20_000
    CLICK: Final[int] = 10_000
    APPLICATION_RESPONSE: Final[int] = 60_000
    SLOT_PATTERN: Final[int] = 60_000

    # Service timeouts (seconds)
    GRACEFUL_SHUTDOWN_SECONDS: Final[int] = 10
    BROWSER_CLOSE_SECONDS: Final[int] = 5


class Delays:
    """Stabilization pauses between UI transitions in MILLISECONDS."""

    AFTER_BOOKING_ENTRY: Final[int] = 600
    AFTER_SPECIALTY_MODE: Final[int] = 800
    AFTER_SPECIALTY_CLICK: Final[int] = 1200
    AFTER_PRACTITIONER_CLICK: Final[int] = 1200
    SLOTS_RENDER_BUFFER: Final[int] = 600

    # Pause between queued jobs (seconds)
    QUEUE_COOLDOWN_SECONDS: Final[float] = 1.5


class CacheTTL:
    """Response cache lifetimes in SECONDS, per workflow."""

    ESPECIALIDADES: Final[int] = 300
    PROFESIONALES: Final[int] = 300
    HORAS: Final[int] = 60


class BrowserDefaults:
    """Browser session defaults."""

    RECYCLE_THRESHOLD: Final[int] = 6
    USER_AGENT: Final[str] = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    ACCEPT_LANGUAGE: Final[str] = "es-CL,es;q=0.9,en;q=0.8"
    VIEWPORT_WIDTH: Final[int] = 1200
    VIEWPORT_HEIGHT: Final[int] = 900
    LAUNCH_ARGS: Final[tuple[str, ...]] = (
        "--no-sandbox",
        "--disable-setuid-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
        "--single-process",
        "--no-zygote",
    )
    # Resource types aborted on pages that only need XHR traffic
    BLOCKED_RESOURCE_TYPES: Final[frozenset[str]] = frozenset({"image", "media", "font"})
