"""Per-source in-memory cache.

One slot per source tag holding the upstream-native records from the last successful
fetch. Slots are replaced wholesale and never evicted, so a stale entry stays around to
be served when a refresh fails.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DEFAULT_TTL_S = 60 * 60


@dataclass(frozen=True)
class CacheEntry:
    records: Tuple[Any, ...]
    timestamp: float


class SourceCache:
    """TTL-gated cache shared by every adapter in the process."""

    def __init__(self, ttl_s: float = DEFAULT_TTL_S, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_s
        self._clock = clock
        self._slots: Dict[str, CacheEntry] = {}

    @property
    def ttl_s(self) -> float:
        return self._ttl

    def get_fresh(self, source: str) -> Optional[Tuple[Any, ...]]:
        """Records for `source` if they were captured less than one TTL ago."""
        entry = self._slots.get(source)
        if entry is None:
            return None
        if self._clock() - entry.timestamp < self._ttl:
            logger.debug("Cache hit for %s (%d records)", source, len(entry.records))
            return entry.records
        return None

    def get_stale(self, source: str) -> Optional[Tuple[Any, ...]]:
        """Records for `source` regardless of age; None if nothing was ever cached."""
        entry = self._slots.get(source)
        return entry.records if entry is not None else None

    def put(self, source: str, records: Sequence[Any]) -> None:
        # Single assignment, so concurrent readers see either the old or the new entry.
        self._slots[source] = CacheEntry(records=tuple(records), timestamp=self._clock())

    def clear(self) -> None:
        self._slots.clear()
