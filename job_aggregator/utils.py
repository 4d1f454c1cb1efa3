"""Utility helpers shared across the aggregator."""

from __future__ import annotations

import re
from typing import Callable, Hashable, Iterable, List, Optional, TypeVar

T = TypeVar("T")

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def uniq_preserve_order(items: Iterable[T], key: Callable[[T], Hashable]) -> List[T]:
    """Deduplicate while preserving first-seen order."""
    seen = set()
    out: List[T] = []
    for it in items:
        k = key(it)
        if k in seen:
            continue
        seen.add(k)
        out.append(it)
    return out


def leading_int(text: str) -> Optional[int]:
    """Integer at the start of `text` ("3 days ago" -> 3), or None."""
    m = _LEADING_INT_RE.match(text or "")
    return int(m.group(1)) if m else None


def recency_score(posted_at: str) -> int:
    """Sort key derived from a relative date string; lower is more recent.

    Only days and weeks are distinguished. Months and anything unparseable share
    the back of the list.
    """
    if "Today" in posted_at:
        return 0
    if "1 day" in posted_at:
        return 1
    if "day" in posted_at:
        return leading_int(posted_at) or 7
    if "week" in posted_at:
        return (leading_int(posted_at) or 0) * 7 or 14
    return 100
