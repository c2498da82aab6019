"""
Bounded fingerprint-keyed memoization for analyzer results.
"""

import logging
import threading
from typing import Generic, TypeVar

from guardian.core.fingerprint import fingerprint

logger = logging.getLogger(__name__)

V = TypeVar("V")


class HashCache(Generic[V]):
    """
    Maps content fingerprints to analysis results.

    Entries keep the order they were inserted in. When the cache is full,
    the oldest-inserted entry is evicted before a new one is added; reads
    never refresh an entry's position.

    Attributes:
        max_size: Maximum number of entries retained
    """

    def __init__(self, max_size: int = 100):
        if max_size < 1:
            raise ValueError(f"max_size must be positive, got {max_size}")
        self._max_size = max_size
        self._entries: dict[int, V] = {}
        self._lock = threading.Lock()

    @property
    def max_size(self) -> int:
        """Get the configured capacity."""
        return self._max_size

    def get(self, text: str) -> V | None:
        """Return the cached value for ``text`` or None."""
        key = fingerprint(text)
        with self._lock:
            return self._entries.get(key)

    def put(self, text: str, value: V) -> None:
        """Store ``value`` under the fingerprint of ``text``."""
        key = fingerprint(text)
        with self._lock:
            if key not in self._entries and len(self._entries) >= self._max_size:
                oldest = next(iter(self._entries))
                del self._entries[oldest]
                logger.debug(f"Evicted cache entry {oldest}")
            self._entries[key] = value

    def clear(self) -> None:
        """Remove every entry."""
        with self._lock:
            self._entries.clear()

    def keys(self) -> list[int]:
        """Return the cached fingerprints, oldest first."""
        with self._lock:
            return list(self._entries)

    def __contains__(self, text: object) -> bool:
        if not isinstance(text, str):
            return False
        key = fingerprint(text)
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
