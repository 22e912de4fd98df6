"""Time-bounded cache for the custom allow-list words.

The cache is an owned object handed to whoever needs it; there is no module
level state. The word store itself lives outside this package and is reached
through the ``loader`` callable.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from ..services.settings import Settings

__all__ = ["AllowListCache", "AllowListStats"]

LOGGER = logging.getLogger(__name__)

WordLoader = Callable[[], Iterable[str]]


@dataclass(slots=True)
class AllowListStats:
    """Counters for cache activity.

    Attributes:
        hits: Reads served from the cached set.
        loads: Successful loader calls.
        failures: Loader calls that raised.
        invalidations: Explicit invalidations.
    """

    hits: int = 0
    loads: int = 0
    failures: int = 0
    invalidations: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "hits": self.hits,
            "loads": self.loads,
            "failures": self.failures,
            "invalidations": self.invalidations,
        }


class AllowListCache:
    """Lower-cased word set reloaded from ``loader`` once ``ttl_seconds`` elapse.

    A ``ttl_seconds`` of 0 or less disables expiry. Loader failures are logged
    and yield an empty set that is not cached, so the next call retries.
    """

    def __init__(
        self,
        loader: WordLoader,
        *,
        ttl_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._lock = threading.RLock()
        self._words: frozenset[str] | None = None
        self._loaded_at = 0.0
        self._stats = AllowListStats()

    @classmethod
    def from_settings(cls, loader: WordLoader, settings: Settings, **kwargs: Any) -> AllowListCache:
        """Build a cache whose expiry follows ``settings.dictionary_ttl``."""

        return cls(loader, ttl_seconds=settings.dictionary_ttl, **kwargs)

    @property
    def ttl_seconds(self) -> float:
        return self._ttl_seconds

    @property
    def stats(self) -> AllowListStats:
        return self._stats

    def words(self) -> frozenset[str]:
        with self._lock:
            if self._words is not None and not self._is_expired():
                self._stats.hits += 1
                return self._words
            try:
                loaded = frozenset(word.strip().lower() for word in self._loader() if word and word.strip())
            except Exception as exc:
                self._stats.failures += 1
                LOGGER.warning("Allow-list loader failed: %s", exc)
                return frozenset()
            self._words = loaded
            self._loaded_at = self._clock()
            self._stats.loads += 1
            LOGGER.debug("Loaded %d allow-list words", len(loaded))
            return loaded

    def contains(self, word: str) -> bool:
        return bool(word) and word.lower() in self.words()

    def invalidate(self) -> None:
        """Drop the cached set so the next read calls the loader."""

        with self._lock:
            self._words = None
            self._loaded_at = 0.0
            self._stats.invalidations += 1

    def _is_expired(self) -> bool:
        if self._ttl_seconds <= 0:
            return False
        return (self._clock() - self._loaded_at) > self._ttl_seconds
