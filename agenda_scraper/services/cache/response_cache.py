"""In-memory response cache with per-workflow TTL."""

import time
from typing import Any, Callable, Dict, Optional, Tuple

from loguru import logger

from agenda_scraper.constants import CacheTTL, LogEmoji
from agenda_scraper.core.enums import WorkflowType
from agenda_scraper.utils.text import normalize

Clock = Callable[[], float]

DEFAULT_TTLS: Dict[WorkflowType, int] = {
    WorkflowType.ESPECIALIDADES: CacheTTL.ESPECIALIDADES,
    WorkflowType.PROFESIONALES: CacheTTL.PROFESIONALES,
    WorkflowType.HORAS: CacheTTL.HORAS,
}


class CacheEntry:
    """Cache entry with TTL support."""

    def __init__(self, value: Any, ttl_seconds: float, created_at: float):
        """
        Initialize cache entry.

        Args:
            value: Value to cache
            ttl_seconds: Time to live in seconds
            created_at: Clock reading when the entry was stored
        """
        self.value = value
        self.created_at = created_at
        self.expires_at = created_at + ttl_seconds

    def is_expired(self, now: float) -> bool:
        """Check if cache entry has expired."""
        return now >= self.expires_at


class ResponseCache:
    """
    Caches successful workflow payloads so repeated requests skip the browser.

    Entries expire silently after the workflow's TTL and are dropped the next
    time they are read or on ``cleanup_expired()``. Failed payloads are never
    stored.
    """

    def __init__(
        self,
        ttls: Optional[Dict[WorkflowType, int]] = None,
        enabled: bool = True,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize response cache.

        Args:
            ttls: Seconds to keep entries, per workflow
            enabled: When False every lookup misses and nothing is stored
            clock: Monotonic time source (time.monotonic by default)
        """
        self.ttls: Dict[WorkflowType, int] = {**DEFAULT_TTLS, **(ttls or {})}
        self.enabled = enabled
        self._clock: Clock = clock or time.monotonic
        self._entries: Dict[Tuple[WorkflowType, str], CacheEntry] = {}
        self._hits = 0
        self._misses = 0

    @staticmethod
    def make_key(*parts: Optional[str]) -> str:
        """Join normalized request parameters into a cache key."""
        return "|".join(normalize(p) for p in parts)

    def get(self, workflow: WorkflowType, key: str) -> Optional[Any]:
        """
        Get payload from cache if not expired.

        Args:
            workflow: Workflow the payload belongs to
            key: Cache key from ``make_key``

        Returns:
            Cached payload or None if expired/missing
        """
        if not self.enabled:
            return None
        entry = self._entries.get((workflow, key))
        if entry is None:
            self._misses += 1
            return None
        if entry.is_expired(self._clock()):
            del self._entries[(workflow, key)]
            self._misses += 1
            logger.debug(f"Cache entry expired: {workflow.value} [{key}]")
            return None
        self._hits += 1
        logger.debug(f"{LogEmoji.CACHE} Cache hit: {workflow.value} [{key}]")
        return entry.value

    def set(
        self, workflow: WorkflowType, key: str, payload: Any, ttl: Optional[int] = None
    ) -> bool:
        """
        Store a successful payload.

        Args:
            workflow: Workflow the payload belongs to
            key: Cache key from ``make_key``
            payload: Response payload
            ttl: Override for the workflow's TTL, in seconds

        Returns:
            True if the payload was stored
        """
        if not self.enabled:
            return False
        if isinstance(payload, dict) and payload.get("success") is False:
            logger.debug(f"Not caching failed {workflow.value} payload [{key}]")
            return False
        seconds = self.ttls.get(workflow, 0) if ttl is None else ttl
        if seconds <= 0:
            return False
        self._entries[(workflow, key)] = CacheEntry(payload, seconds, self._clock())
        logger.debug(f"{LogEmoji.CACHE} Cached {workflow.value} [{key}] for {seconds}s")
        return True

    def invalidate(self, workflow: Optional[WorkflowType] = None) -> int:
        """
        Drop entries of one workflow, or all of them.

        Returns:
            Number of entries removed
        """
        if workflow is None:
            count = len(self._entries)
            self._entries.clear()
        else:
            keys = [k for k in self._entries if k[0] == workflow]
            for k in keys:
                del self._entries[k]
            count = len(keys)
        if count:
            logger.info(f"Cache cleared ({count} entries)")
        return count

    def cleanup_expired(self) -> int:
        """
        Remove expired cache entries.

        Returns:
            Number of entries removed
        """
        now = self._clock()
        expired = [k for k, v in self._entries.items() if v.is_expired(now)]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug(f"Removed {len(expired)} expired cache entries")
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "ttl_seconds": {w.value: t for w, t in self.ttls.items()},
        }
