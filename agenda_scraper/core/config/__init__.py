"""Configuration management module."""

from .settings import DEFAULT_AGENDAS, ScraperSettings, get_settings, reset_settings

__all__ = [
    "DEFAULT_AGENDAS",
    "ScraperSettings",
    "get_settings",
    "reset_settings",
]
