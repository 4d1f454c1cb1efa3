"""Remotive jobs source connector.

Remotive provides a public JSON endpoint listing remote-only roles, so every record is
`workType="remote"`. There is no per-job endpoint; lookups scan the cached listing.

Docs: https://remotive.com/api/remote-jobs

Note: Free APIs can change; treat this as a pluggable connector.
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


class RemotiveSource(JobSource):
    """Fetch jobs from Remotive and normalize them."""

    name = "remotive"
    base_url = "https://remotive.com/api/remote-jobs"
    limit = 100

    async def download(self) -> List[Record]:
        payload = await self._get_json(
            self.base_url,
            params={"limit": self.limit},
            headers={"Accept": "application/json"},
        )
        jobs = payload.get("jobs")
        if not isinstance(jobs, list):
            raise UpstreamError(self.name, "payload has no 'jobs' list")

        out: List[Record] = []
        for j in jobs[: self.limit]:
            if not (isinstance(j, dict) and text(j, "title") and text(j, "company_name") and text(j, "url")):
                logger.debug("Skipping incomplete Remotive job: %r", j.get("id") if isinstance(j, dict) else j)
                continue
            out.append(j)
        return out

    def native_id(self, record: Record) -> str:
        return text(record, "id")

    def to_listing(self, record: Record, full: bool = False) -> JobListing:
        title = text(record, "title")
        company = text(record, "company_name")
        desc = record.get("description") or ""
        tags = string_list(record.get("tags"))

        return JobListing(
            id=self.listing_id(self.native_id(record)),
            title=title,
            company=company,
            location=text(record, "candidate_required_location") or "Remote",
            work_type="remote",
            employment_type=map_employment_type(text(record, "job_type")),
            seniority=infer_seniority(title),
            salary=text(record, "salary") or None,
            # Remotive has "publication_date" like "2024-01-01T12:34:56"
            posted_at=format_posted_at(record.get("publication_date")),
            description=strip_html(desc) if full else summarize_description(desc),
            requirements=extract_requirements(desc),
            benefits=extract_benefits(desc),
            apply_url=text(record, "url"),
            company_reviews_url=company_reviews_url(company, title),
            company_logo=text(record, "company_logo") or None,
            tags=tags,
            category=text(record, "category") or infer_category(title, tags),
            source=self.name,
        )
