"""Base classes for source connectors.

A connector knows one upstream: how to download its native records, and how to map a
record onto `JobListing`. The base class owns the shared contract:

- native records are cached per source (see `SourceCache`) and re-mapped on every call,
  so relative dates are always computed against the current time;
- `fetch()` never raises. Upstream failures become a `FetchResult` carrying the last
  cached records (or nothing) plus a diagnostic for the caller to log.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import ValidationError

from ..cache import SourceCache
from ..errors import UpstreamError
from ..models import JobListing

logger = logging.getLogger(__name__)

Record = Dict[str, Any]

# What a mapper raises on a record with missing or mistyped fields.
MALFORMED_RECORD_ERRORS = (ValidationError, KeyError, TypeError, AttributeError, ValueError)


@dataclass
class FetchResult:
    """Outcome of one adapter call. `listings` is always safe to use."""

    source: str
    listings: List[JobListing] = field(default_factory=list)
    diagnostic: Optional[str] = None
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.diagnostic is None


class JobSource(ABC):
    """Abstract base class for a job source connector."""

    name: str
    # False for upstreams with no stable per-job endpoint and no scannable listing.
    supports_lookup: bool = True

    def __init__(self, client: httpx.AsyncClient, cache: SourceCache) -> None:
        self._client = client
        self._cache = cache

    @property
    def enabled(self) -> bool:
        """Whether the source is configured; disabled sources contribute nothing."""
        return True

    @abstractmethod
    async def download(self) -> List[Record]:
        """Fetch native records from the upstream. Raises UpstreamError."""
        raise NotImplementedError

    @abstractmethod
    def native_id(self, record: Record) -> str:
        raise NotImplementedError

    @abstractmethod
    def to_listing(self, record: Record, full: bool = False) -> JobListing:
        """Map a native record. `full` keeps the whole description (detail view)."""
        raise NotImplementedError

    def listing_id(self, native_id: Any) -> str:
        return f"{self.name}-{native_id}"

    async def load_records(self, query: Optional[str] = None) -> Sequence[Record]:
        """Native records, from cache while fresh, else downloaded and cached.

        `query` is ignored by upstreams without server-side search.
        """
        cached = self._cache.get_fresh(self.name)
        if cached is not None:
            return cached

        records = await self.download()
        self._cache.put(self.name, records)
        logger.info("Fetched %d records from %s", len(records), self.name)
        return records

    async def fetch(self, query: Optional[str] = None) -> FetchResult:
        """Fetch normalized listings, degrading to stale cache (or nothing) on failure."""
        if not self.enabled:
            return FetchResult(source=self.name)

        try:
            records = await self.load_records(query)
        except UpstreamError as exc:
            fallback = self._cache.get_stale(self.name)
            logger.warning(
                "Error fetching from %s: %s (serving %s)",
                self.name,
                exc,
                f"{len(fallback)} stale records" if fallback is not None else "nothing",
            )
            return FetchResult(
                source=self.name,
                listings=self.to_listings(fallback or ()),
                diagnostic=str(exc),
                stale=fallback is not None,
            )

        return FetchResult(source=self.name, listings=self.to_listings(records))

    async def fetch_one(self, native_id: str) -> Optional[JobListing]:
        """Resolve one record with its full description by scanning the listing."""
        if not self.enabled:
            return None

        try:
            records = await self.load_records()
        except UpstreamError as exc:
            logger.warning("Error fetching from %s for lookup: %s", self.name, exc)
            records = self._cache.get_stale(self.name) or ()

        for record in records:
            if self.native_id(record) == native_id:
                return self.expand(record)
        return None

    def expand(self, record: Record) -> Optional[JobListing]:
        """Full-description listing for the detail view, or None if the record is malformed."""
        try:
            return self.to_listing(record, full=True)
        except MALFORMED_RECORD_ERRORS as exc:
            logger.warning("Malformed %s record %s: %s", self.name, self.native_id(record), exc)
            return None

    def to_listings(self, records: Sequence[Record]) -> List[JobListing]:
        out: List[JobListing] = []
        for record in records:
            try:
                out.append(self.to_listing(record))
            except MALFORMED_RECORD_ERRORS as exc:
                logger.debug("Skipping malformed %s record: %s", self.name, exc)
        return out

    async def _get_json(
        self,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            resp = await self._client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as exc:
            raise UpstreamError(self.name, f"API error: {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(self.name, f"request failed: {exc!r}") from exc
        except ValueError as exc:
            raise UpstreamError(self.name, "response is not valid JSON") from exc

        if not isinstance(payload, dict):
            raise UpstreamError(self.name, "unexpected response shape")
        return payload


def text(record: Record, key: str) -> str:
    """String field from a native record, stripped; "" when absent or not a string."""
    val = record.get(key)
    if isinstance(val, (int, float)) and not isinstance(val, bool):
        return str(val)
    return val.strip() if isinstance(val, str) else ""


def string_list(val: Any) -> List[str]:
    if not isinstance(val, list):
        return []
    return [str(v) for v in val if v]
