"""Arbeitnow jobs source connector.

Docs: https://www.arbeitnow.com/api/job-board-api

European job board. Only a boolean remote flag is available, so records are either
remote or onsite, never hybrid. There is no per-job endpoint; lookups scan the cached
first page by slug.
"""

from __future__ import annotations

import logging
from typing import List

from ..errors import UpstreamError
from ..models import JobListing
from ..normalize import (
    company_reviews_url,
    extract_benefits,
    extract_requirements,
    format_posted_at,
    infer_category,
    infer_seniority,
    map_employment_type,
    strip_html,
    summarize_description,
)
from .base import JobSource, Record, string_list, text

logger = logging.getLogger(__name__)


class ArbeitnowSource(JobSource):
    """Fetch jobs from Arbeitnow and normalize them."""

    name = "arbeitnow"
    base_url = "https://www.arbeitnow.com/api/job-board-api"
    limit = 100

    async def download(self) -> List[Record]:
        payload = await self._get_json(self.base_url, headers={"Accept": "application/json"})
        jobs = payload.get("data")
        if not isinstance(jobs, list):
            raise UpstreamError(self.name, "payload has no 'data' list")

        out: List[Record] = []
        for j in jobs[: self.limit]:
            if not (isinstance(j, dict) and text(j, "slug") and text(j, "title")
                    and text(j, "company_name") and text(j, "url")):
                logger.debug("Skipping incomplete Arbeitnow job: %r", j.get("slug") if isinstance(j, dict) else j)
                continue
            out.append(j)
        return out

    def native_id(self, record: Record) -> str:
        return text(record, "slug")

    def to_listing(self, record: Record, full: bool = False) -> JobListing:
        title = text(record, "title")
        company = text(record, "company_name")
        desc = record.get("description") or ""
        tags = string_list(record.get("tags"))
        remote = bool(record.get("remote", False))
        job_types = string_list(record.get("job_types"))

        return JobListing(
            id=self.listing_id(self.native_id(record)),
            title=title,
            company=company,
            location=text(record, "location") or ("Remote" if remote else "Unknown"),
            work_type="remote" if remote else "onsite",
            employment_type=map_employment_type(job_types[0] if job_types else "full-time"),
            seniority=infer_seniority(title),
            # Arbeitnow sends created_at as epoch seconds.
            posted_at=format_posted_at(record.get("created_at")),
            description=strip_html(desc) if full else summarize_description(desc),
            requirements=extract_requirements(desc),
            benefits=extract_benefits(desc),
            apply_url=text(record, "url"),
            company_reviews_url=company_reviews_url(company, title),
            tags=tags,
            category=infer_category(title, tags),
            source=self.name,
        )
