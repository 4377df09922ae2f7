"""Response caching."""

from .response_cache import CacheEntry, ResponseCache

__all__ = ["CacheEntry", "ResponseCache"]
