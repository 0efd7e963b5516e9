"""In-memory TTL cache for idempotent upstream reads"""
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar
import json
import logging
import time

from streamflow.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ResponseCache:
    """
    Response cache keyed by request URL plus serialized options.

    Entries are never evicted: a stale entry is ignored on read and
    replaced by the next successful load. Failed loads are never stored.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        """
        Initialize response cache

        Args:
            ttl_seconds: Entry lifetime (defaults to settings.cache_ttl_seconds)
            clock: Monotonic time source in seconds
        """
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else settings.cache_ttl_seconds
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    @staticmethod
    def make_key(url: str, options: Optional[Dict[str, Any]] = None) -> str:
        """Deterministic key for a request: distinct params or bodies give distinct keys"""
        return f"{url}_{json.dumps(options or {}, sort_keys=True, default=str)}"

    def get(self, key: str) -> Tuple[bool, Any]:
        """Return (hit, value) for a fresh entry"""
        entry = self._entries.get(key)
        if entry is None:
            return False, None
        value, stored_at = entry
        if self._clock() - stored_at < self.ttl_seconds:
            return True, value
        return False, None

    def set(self, key: str, value: Any) -> None:
        self._entries[key] = (value, self._clock())

    async def fetch_with_cache(self, key: str, loader: Callable[[], Awaitable[T]]) -> T:
        """
        Return a fresh cached value or load, store and return a new one

        Args:
            key: Cache key (see make_key)
            loader: Coroutine factory performing the actual request

        Raises:
            Whatever the loader raises; the failure is not cached
        """
        hit, value = self.get(key)
        if hit:
            logger.debug(f"Cache hit: {key}")
            return value

        value = await loader()
        self.set(key, value)
        return value

    def clear_cache(self) -> None:
        count = len(self._entries)
        self._entries.clear()
        logger.info(f"Cleared {count} cached responses")

    def __len__(self) -> int:
        return len(self._entries)
