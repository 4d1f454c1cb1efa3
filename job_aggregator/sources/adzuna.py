"""Adzuna jobs source connector.

Regional search API; needs ADZUNA_APP_ID and ADZUNA_APP_KEY. Without both, the source
is disabled and contributes nothing. Adzuna has no stable per-job endpoint, so detail
lookups are not supported: the listing's redirect URL is the way to view a job.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ..cache import SourceCache
from ..errors import UpstreamError
from ..models import JobListing
from ..normalize import (
    company_reviews_url,
    extract_benefits,
    extract_requirements,
    format_posted_at,
    format_salary,
    infer_category,
    infer_seniority,
    map_employment_type,
    strip_html,
    summarize_description,
)
from .base import JobSource, Record, text

logger = logging.getLogger(__name__)

SEARCH_TERMS = ["it-jobs", "marketing-jobs", "sales-jobs", "healthcare-nursing-jobs"]


def _display_name(record: Record, key: str) -> str:
    nested = record.get(key)
    if isinstance(nested, dict):
        return text(nested, "display_name")
    return ""


class AdzunaSource(JobSource):
    """Fetch jobs from Adzuna (US) and normalize them."""

    name = "adzuna"
    supports_lookup = False
    country = "us"
    results_per_page = 25
    max_days_old = 30

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: SourceCache,
        app_id: Optional[str] = None,
        app_key: Optional[str] = None,
        terms: Sequence[str] = tuple(SEARCH_TERMS),
    ) -> None:
        super().__init__(client, cache)
        self._app_id = app_id
        self._app_key = app_key
        self._terms = list(terms)

    @property
    def enabled(self) -> bool:
        return bool(self._app_id and self._app_key)

    @property
    def search_url(self) -> str:
        return f"https://api.adzuna.com/v1/api/jobs/{self.country}/search/1"

    async def _search(self, term: str) -> List[Record]:
        payload = await self._get_json(
            self.search_url,
            params={
                "app_id": self._app_id,
                "app_key": self._app_key,
                "results_per_page": self.results_per_page,
                "what": term,
                "max_days_old": self.max_days_old,
            },
        )
        results = payload.get("results")
        if not isinstance(results, list):
            return []
        return [
            r for r in results
            if isinstance(r, dict) and text(r, "id") and text(r, "title")
            and _display_name(r, "company") and text(r, "redirect_url")
        ]

    async def download(self) -> List[Record]:
        records: List[Record] = []
        failures: List[str] = []
        for term in self._terms:
            try:
                records.extend(await self._search(term))
            except UpstreamError as exc:
                logger.warning("Error fetching %s %s: %s", self.name, term, exc)
                failures.append(term)

        if self._terms and len(failures) == len(self._terms):
            raise UpstreamError(self.name, "all search queries failed")
        return records

    async def fetch_one(self, native_id: str) -> Optional[JobListing]:
        return None

    def native_id(self, record: Record) -> str:
        return text(record, "id")

    def to_listing(self, record: Record, full: bool = False) -> JobListing:
        title = text(record, "title")
        company = _display_name(record, "company")
        desc = record.get("description") or ""
        blob_title, blob_desc = title.lower(), desc.lower()
        is_remote = "remote" in blob_title or "remote" in blob_desc
        is_hybrid = "hybrid" in blob_title or "hybrid" in blob_desc
        category: Dict[str, Any] = record.get("category") or {}

        return JobListing(
            id=self.listing_id(self.native_id(record)),
            title=title,
            company=company,
            location=_display_name(record, "location") or "Unknown",
            work_type="remote" if is_remote else "hybrid" if is_hybrid else "onsite",
            employment_type=map_employment_type(
                text(record, "contract_type") or text(record, "contract_time") or "full-time"
            ),
            seniority=infer_seniority(title),
            salary=format_salary(record.get("salary_min"), record.get("salary_max")),
            posted_at=format_posted_at(record.get("created")),
            description=strip_html(desc) if full else summarize_description(desc),
            requirements=extract_requirements(desc),
            benefits=extract_benefits(desc),
            apply_url=text(record, "redirect_url"),
            company_reviews_url=company_reviews_url(company, title),
            category=text(category, "label") or infer_category(title),
            source=self.name,
        )
