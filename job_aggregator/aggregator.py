"""Aggregation & query engine.

Fans out to every source concurrently, then filters, deduplicates across sources,
sorts by recency and pages the merged list. Source failures never abort a request:
each source hands back a `FetchResult` whose listings are always usable.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Optional, Sequence

from .models import JobListing, ListingPage, ListingQuery
from .sources.base import FetchResult, JobSource
from .utils import recency_score, uniq_preserve_order

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 200
ALL = "all"


def matches_text(job: JobListing, q: str) -> bool:
    q = q.lower()
    return (
        q in job.title.lower()
        or q in job.company.lower()
        or q in job.description.lower()
        or any(q in tag.lower() for tag in job.tags)
    )


def apply_filters(jobs: Iterable[JobListing], query: ListingQuery) -> List[JobListing]:
    """Free-text, location and facet filters.

    Facets set to "all" are skipped; any other value is an exact match, so a value
    outside the enumeration matches nothing.
    """
    out = list(jobs)

    if query.q:
        out = [j for j in out if matches_text(j, query.q)]

    if query.location:
        loc = query.location.lower()
        out = [j for j in out if loc in j.location.lower()]

    if query.work_type != ALL:
        out = [j for j in out if j.work_type == query.work_type]
    if query.employment_type != ALL:
        out = [j for j in out if j.employment_type == query.employment_type]
    if query.seniority != ALL:
        out = [j for j in out if j.seniority == query.seniority]
    if query.category != ALL:
        category = query.category.lower()
        out = [j for j in out if (j.category or "").lower() == category]

    return out


def dedupe_listings(jobs: Iterable[JobListing]) -> List[JobListing]:
    """Drop cross-source duplicates by title + company; first occurrence wins.

    Ids can't be used here: the same posting has a different native id on each board.
    """
    return uniq_preserve_order(jobs, key=lambda j: (j.title.lower(), j.company.lower()))


def sort_by_recency(jobs: Iterable[JobListing]) -> List[JobListing]:
    # sorted() is stable, so ties keep source order.
    return sorted(jobs, key=lambda j: recency_score(j.posted_at))


class JobAggregator:
    """Merge the listings of several sources into one page of results."""

    def __init__(self, sources: Sequence[JobSource], max_results: int = DEFAULT_MAX_RESULTS) -> None:
        self._sources = list(sources)
        self._max_results = max_results

    @property
    def sources(self) -> List[JobSource]:
        return list(self._sources)

    async def fetch_all(self, query: Optional[str] = None) -> List[FetchResult]:
        """Call every source concurrently and wait for all of them."""
        results = await asyncio.gather(
            *(source.fetch(query) for source in self._sources),
            return_exceptions=True,
        )

        out: List[FetchResult] = []
        for source, res in zip(self._sources, results):
            if isinstance(res, BaseException):
                logger.error("Source %s raised unexpectedly: %r", source.name, res)
                res = FetchResult(source=source.name, diagnostic=repr(res))
            elif res.diagnostic:
                logger.warning(
                    "Source %s degraded (%s); contributing %d cached listings",
                    res.source, res.diagnostic, len(res.listings),
                )
            out.append(res)
        return out

    async def search(self, query: Optional[ListingQuery] = None) -> ListingPage:
        query = query or ListingQuery()

        results = await self.fetch_all(query.q or None)
        sources = {r.source: len(r.listings) for r in results}
        jobs = [job for r in results for job in r.listings]
        # Raw fetch size: counted before filters and dedup, unlike `jobs`.
        total = len(jobs)

        jobs = sort_by_recency(dedupe_listings(apply_filters(jobs, query)))

        start = (query.page - 1) * self._max_results
        page = jobs[start:start + self._max_results]

        logger.info(
            "Aggregated %d listings (%d matching, %d returned) from %s",
            total, len(jobs), len(page), sources,
        )
        return ListingPage(jobs=page, total=total, sources=sources)
