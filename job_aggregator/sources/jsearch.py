"""JSearch (RapidAPI) source connector.

JSearch aggregates Google for Jobs and supports real server-side search, but it is
rate-limited per key. Instead of one exhaustive query we rotate through a fixed list of
broad category terms, a few per refresh, and let the cache carry the result for a TTL.
A caller-supplied free-text query skips the rotation and is issued once, uncached.

Docs: https://rapidapi.com/letscrunch/api/jsearch
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
from ..utils import uniq_preserve_order
from .base import JobSource, Record, string_list, text

logger = logging.getLogger(__name__)

# Rotated through a few at a time to spread API usage.
JOB_CATEGORIES = [
    "software developer",
    "marketing manager",
    "data analyst",
    "product manager",
    "graphic designer",
    "sales representative",
    "financial analyst",
    "human resources",
    "project manager",
    "customer service",
]

# Native records carry the category derived from the query that produced them.
CATEGORY_KEY = "_category"


class JSearchSource(JobSource):
    """Search JSearch by category (or free text) and normalize the hits."""

    name = "jsearch"
    host = "jsearch.p.rapidapi.com"
    search_url = f"https://{host}/search"
    details_url = f"https://{host}/job-details"

    def __init__(
        self,
        client: httpx.AsyncClient,
        cache: SourceCache,
        api_key: Optional[str] = None,
        categories_per_cycle: int = 3,
        categories: Sequence[str] = tuple(JOB_CATEGORIES),
    ) -> None:
        super().__init__(client, cache)
        self._api_key = api_key
        self._categories = list(categories)
        self._per_cycle = max(1, min(categories_per_cycle, len(self._categories)))
        self._cursor = 0

    @property
    def enabled(self) -> bool:
        return bool(self._api_key)

    def _headers(self) -> Dict[str, str]:
        return {"X-RapidAPI-Key": self._api_key or "", "X-RapidAPI-Host": self.host}

    def next_categories(self) -> List[str]:
        """Advance the rotation and return this cycle's window of category terms."""
        n = len(self._categories)
        window = [self._categories[(self._cursor + i) % n] for i in range(self._per_cycle)]
        self._cursor = (self._cursor + self._per_cycle) % n
        return window

    async def _search(self, term: str) -> List[Record]:
        payload = await self._get_json(
            self.search_url,
            params={
                "query": f"{term} USA",
                "page": 1,
                "num_pages": 2,
                "date_posted": "month",
            },
            headers=self._headers(),
        )
        data = payload.get("data")
        if payload.get("status") != "OK" or not isinstance(data, list):
            return []

        category = infer_category(term)
        out: List[Record] = []
        for j in data:
            if not (isinstance(j, dict) and text(j, "job_id") and text(j, "job_title")
                    and text(j, "employer_name") and text(j, "job_apply_link")):
                continue
            out.append({**j, CATEGORY_KEY: category})
        return out

    async def download(self) -> List[Record]:
        records: List[Record] = []
        failures: List[str] = []
        terms = self.next_categories()

        for term in terms:
            try:
                records.extend(await self._search(term))
            except UpstreamError as exc:
                logger.warning("Error fetching %s category %r: %s", self.name, term, exc)
                failures.append(term)

        if terms and len(failures) == len(terms):
            raise UpstreamError(self.name, f"all category queries failed: {', '.join(failures)}")

        # The same posting shows up under several categories; first one wins.
        return uniq_preserve_order(records, key=self.native_id)

    async def load_records(self, query: Optional[str] = None) -> Sequence[Record]:
        if query:
            return await self._search(query)
        return await super().load_records()

    async def fetch_one(self, native_id: str) -> Optional[JobListing]:
        """Resolve one job through the job-details endpoint."""
        if not self.enabled:
            logger.error("RAPIDAPI_KEY not configured")
            return None

        try:
            payload = await self._get_json(
                self.details_url, params={"job_id": native_id}, headers=self._headers()
            )
        except UpstreamError as exc:
            logger.warning("Error fetching %s job %s: %s", self.name, native_id, exc)
            return None

        data = payload.get("data")
        if payload.get("status") != "OK" or not isinstance(data, list) or not data:
            return None
        if not isinstance(data[0], dict) or not text(data[0], "job_id"):
            return None
        return self.expand(data[0])

    def native_id(self, record: Record) -> str:
        return text(record, "job_id")

    @staticmethod
    def _location(record: Record) -> str:
        city, state, country = text(record, "job_city"), text(record, "job_state"), text(record, "job_country")
        location = "United States"
        if city and state:
            location = f"{city}, {state}"
        elif state:
            location = state
        elif country:
            location = country
        if record.get("job_is_remote"):
            location = f"{location} (Remote)"
        return location

    @staticmethod
    def _work_type(record: Record) -> str:
        if record.get("job_is_remote"):
            return "remote"
        blob = f"{text(record, 'job_title')}\n{record.get('job_description') or ''}".lower()
        return "hybrid" if "hybrid" in blob else "onsite"

    def to_listing(self, record: Record, full: bool = False) -> JobListing:
        title = text(record, "job_title")
        company = text(record, "employer_name")
        desc = record.get("job_description") or ""
        skills = string_list(record.get("job_required_skills"))
        highlights: Dict[str, Any] = record.get("job_highlights") or {}

        return JobListing(
            id=self.listing_id(self.native_id(record)),
            title=title,
            company=company,
            location=self._location(record),
            work_type=self._work_type(record),
            employment_type=map_employment_type(text(record, "job_employment_type")),
            seniority=infer_seniority(title),
            salary=format_salary(
                record.get("job_min_salary"),
                record.get("job_max_salary"),
                record.get("job_salary_currency"),
                record.get("job_salary_period"),
            ),
            posted_at=format_posted_at(record.get("job_posted_at_datetime_utc")),
            description=strip_html(desc) if full else summarize_description(desc),
            requirements=extract_requirements(desc, string_list(highlights.get("Qualifications"))),
            benefits=extract_benefits(desc, string_list(highlights.get("Benefits"))),
            apply_url=text(record, "job_apply_link"),
            company_reviews_url=company_reviews_url(company, title),
            company_logo=text(record, "employer_logo") or None,
            tags=skills,
            category=record.get(CATEGORY_KEY) or infer_category(title, skills),
            source=self.name,
        )
