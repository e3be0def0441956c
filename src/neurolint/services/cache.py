"""TransformationCache: (input, enabled layers) -> output with TTL expiry.

INVARIANT: invalidation is time-only, never content-aware.  The enabled
layer set is de-duplicated and sorted before hashing, so argument order
never changes cache identity.

The cache is shared, process-wide mutable state without a lock: racing
runs on the same key may both compute and write, and both write equal
content.
"""

from __future__ import annotations

import hashlib
import logging
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60


def cache_key(input_text: str, layer_ids: Iterable[int], *, variant: str = "") -> str:
    """Stable key for *input_text* run through the given layer set.

    *variant* separates runs whose output differs for the same input and
    layers (e.g. runs that act on revert recommendations).
    """
    ids = ",".join(str(i) for i in sorted(set(layer_ids)))
    digest = hashlib.sha256()
    digest.update(variant.encode("utf-8"))
    digest.update(b"\x00")
    digest.update(ids.encode("utf-8"))
    digest.update(b"\x00")
    digest.update(input_text.encode("utf-8"))
    return digest.hexdigest()


@dataclass(frozen=True)
class CacheEntry:
    key: str
    output_text: str
    created_at: float


class TransformationCache:
    """In-memory TTL cache of pipeline outputs.

    ``clock`` returns seconds; it defaults to :func:`time.monotonic` and
    is injectable so tests can move time forward.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def _expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at > self.ttl_seconds

    def get(self, key: str) -> str | None:
        """Return the cached output, or None when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            self._entries.pop(key, None)
            return None
        return entry.output_text

    def set(self, key: str, output_text: str) -> None:
        """Store *output_text* and sweep every expired entry."""
        now = self._clock()
        self._entries[key] = CacheEntry(key=key, output_text=output_text, created_at=now)
        self.sweep(now)

    def sweep(self, now: float | None = None) -> int:
        """Drop expired entries; return how many were removed."""
        now = self._clock() if now is None else now
        expired = [k for k, entry in self._entries.items() if self._expired(entry, now)]
        for k in expired:
            self._entries.pop(k, None)
        if expired:
            logger.debug("Swept %d expired cache entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()


_default_cache: TransformationCache | None = None


def get_default_cache() -> TransformationCache:
    """The process-wide cache shared by every default pipeline."""
    global _default_cache
    if _default_cache is None:
        _default_cache = TransformationCache()
    return _default_cache
