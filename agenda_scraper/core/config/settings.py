"""Application settings with Pydantic validation."""

from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agenda_scraper.constants import BrowserDefaults, CacheTTL, Delays, Timeouts
from agenda_scraper.core.enums import WorkflowType
from agenda_scraper.models.schemas import BookingSource

DEFAULT_AGENDAS: Dict[str, str] = {
    "kineyfisio": "https://web.philaxmed.cl/ReservaOnline.html?mc=kineyfisio#_",
    "cesmed": "https://s2.philaxmed.cl/ReservaOnline.html?mc=cesmed#_",
}


class ScraperSettings(BaseSettings):
    """Application settings with validation and environment variable support."""

    # Environment
    env: str = Field(
        default="production", description="Environment (production, development, testing)"
    )
    service_name: str = Field(
        default="Philaxmed Multi-Agenda Automation", description="Name reported by /health"
    )

    @model_validator(mode="before")
    @classmethod
    def default_env_for_pytest(cls, data: Any) -> Any:
        """Auto-detect testing environment when running under pytest."""
        import sys

        if not isinstance(data, dict):
            return data

        if ("env" not in data or not data.get("env")) and "pytest" in sys.modules:
            data["env"] = "testing"

        return data

    # HTTP server
    host: str = Field(default="0.0.0.0", description="Bind address for the HTTP server")
    port: int = Field(default=3000, ge=1, le=65535, description="Port for the HTTP server")
    cors_allowed_origins: str = Field(
        default="*", description="Comma-separated list of allowed CORS origins"
    )

    # Booking sources
    agenda_sources: Dict[str, str] = Field(
        default_factory=lambda: dict(DEFAULT_AGENDAS),
        description="Mapping of agenda key to booking widget URL (JSON in env)",
    )
    selectors_file: str = Field(
        default="config/selectors.yaml", description="Path to the selector catalogue"
    )

    # Browser
    headless: bool = Field(default=True, description="Run Chromium headless")
    browser_args: List[str] = Field(
        default_factory=lambda: list(BrowserDefaults.LAUNCH_ARGS),
        description="Extra Chromium command-line flags",
    )
    user_agent: str = Field(
        default=BrowserDefaults.USER_AGENT, description="User agent for new contexts"
    )
    accept_language: str = Field(
        default=BrowserDefaults.ACCEPT_LANGUAGE,
        description="Accept-Language header for new contexts",
    )
    viewport_width: int = Field(default=BrowserDefaults.VIEWPORT_WIDTH, ge=320)
    viewport_height: int = Field(default=BrowserDefaults.VIEWPORT_HEIGHT, ge=240)
    recycle_threshold: int = Field(
        default=BrowserDefaults.RECYCLE_THRESHOLD,
        ge=1,
        le=100,
        description="Completed workflows before the browser is relaunched",
    )

    # Queue and timing
    queue_cooldown_seconds: float = Field(
        default=Delays.QUEUE_COOLDOWN_SECONDS,
        ge=0,
        description="Pause between consecutive queued jobs",
    )
    navigation_timeout_ms: int = Field(default=Timeouts.NAVIGATION, ge=1000)
    selector_timeout_ms: int = Field(default=Timeouts.SELECTOR_WAIT, ge=100)
    response_timeout_ms: int = Field(
        default=Timeouts.APPLICATION_RESPONSE,
        ge=100,
        description="Wait for the booking application's background response",
    )
    slot_pattern_timeout_ms: int = Field(default=Timeouts.SLOT_PATTERN, ge=100)

    # Cache
    cache_enabled: bool = Field(default=True, description="Enable the in-memory response cache")
    cache_ttl_especialidades: int = Field(default=CacheTTL.ESPECIALIDADES, ge=0)
    cache_ttl_profesionales: int = Field(default=CacheTTL.PROFESIONALES, ge=0)
    cache_ttl_horas: int = Field(default=CacheTTL.HORAS, ge=0)

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(default=False, description="Serialize file logs as JSON")
    log_dir: Optional[str] = Field(default=None, description="Directory for log files")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value."""
        allowed = ["production", "development", "testing", "staging"]
        if v.lower() not in allowed:
            raise ValueError(f'ENV must be one of: {", ".join(allowed)}')
        return v.lower()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f'LOG_LEVEL must be one of: {", ".join(allowed)}')
        return v_upper

    @field_validator("agenda_sources")
    @classmethod
    def validate_agenda_sources(cls, v: Dict[str, str]) -> Dict[str, str]:
        """Agenda keys are lowercase identifiers and URLs must be absolute http(s)."""
        if not v:
            raise ValueError("AGENDA_SOURCES must define at least one agenda")
        cleaned: Dict[str, str] = {}
        for key, url in v.items():
            key = key.strip().lower()
            if not key:
                raise ValueError("Agenda keys cannot be blank")
            parsed = urlparse(url)
            if parsed.scheme not in ("http", "https") or not parsed.netloc:
                raise ValueError(f"Agenda '{key}' has an invalid URL: {url}")
            cleaned[key] = url
        return cleaned

    def is_development(self) -> bool:
        return self.env == "development"

    def get_sources(self) -> Dict[str, BookingSource]:
        """
        Build the immutable booking source table.

        Returns:
            Mapping of agenda key to BookingSource
        """
        return {key: BookingSource(key=key, url=url) for key, url in self.agenda_sources.items()}

    def cache_ttls(self) -> Dict[WorkflowType, int]:
        return {
            WorkflowType.ESPECIALIDADES: self.cache_ttl_especialidades,
            WorkflowType.PROFESIONALES: self.cache_ttl_profesionales,
            WorkflowType.HORAS: self.cache_ttl_horas,
        }

    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]


# Singleton instance
_settings: Optional[ScraperSettings] = None


def get_settings() -> ScraperSettings:
    """
    Get application settings singleton.

    Returns:
        ScraperSettings instance

    Raises:
        ValidationError: If settings are invalid
    """
    global _settings
    if _settings is None:
        _settings = ScraperSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
