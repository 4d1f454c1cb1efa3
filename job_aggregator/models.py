"""Data models for the job aggregator.

Every upstream board is mapped onto one canonical `JobListing`. The field names are
snake_case in Python and camelCase on the wire (the frontend consumes the JSON shape
directly), so serialize with `model_dump(mode="json", by_alias=True, exclude_none=True)`.

This file uses Pydantic v2.
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


WorkType = Literal["remote", "hybrid", "onsite"]
EmploymentType = Literal["full-time", "part-time", "contract"]
Seniority = Literal["entry", "mid", "senior"]
SourceTag = Literal["remotive", "jsearch", "arbeitnow", "adzuna"]

WORK_TYPES = ("remote", "hybrid", "onsite")
EMPLOYMENT_TYPES = ("full-time", "part-time", "contract")
SENIORITIES = ("entry", "mid", "senior")
SOURCE_TAGS = ("remotive", "jsearch", "arbeitnow", "adzuna")


class JobListing(BaseModel):
    """A normalized job record.

    `id` is always `<source>-<native id>`; the resolver dispatches on that prefix.
    `requirements` and `benefits` are never empty: extractors fall back to a single
    sentinel entry instead.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., min_length=1)
    title: str = Field(..., min_length=1)
    company: str = Field(..., min_length=1)
    location: str

    work_type: WorkType
    employment_type: EmploymentType = "full-time"
    seniority: Seniority = "mid"

    salary: Optional[str] = None
    posted_at: str = Field(..., description="Relative posting date, e.g. '3 days ago'.")

    description: str = ""
    requirements: List[str] = Field(..., min_length=1)
    benefits: List[str] = Field(..., min_length=1)

    apply_url: str = Field(..., min_length=1)
    company_reviews_url: str
    company_logo: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    source: SourceTag

    @model_validator(mode="after")
    def _id_matches_source(self) -> "JobListing":
        if not self.id.startswith(f"{self.source}-"):
            raise ValueError(f"id {self.id!r} does not carry the '{self.source}-' prefix")
        return self

    def to_json(self) -> Dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ListingQuery(BaseModel):
    """Filters accepted by the listing endpoint. Facets use "all" to mean unfiltered."""

    q: Optional[str] = None
    location: Optional[str] = None
    work_type: str = "all"
    employment_type: str = "all"
    seniority: str = "all"
    category: str = "all"
    page: int = Field(default=1, ge=1)


class ListingPage(BaseModel):
    """One aggregation result.

    `total` and `sources` are raw fetch sizes, counted before filters, cross-source
    dedup and truncation. `jobs` is the filtered, deduplicated page, so `len(jobs)`
    can be smaller than `total` even on the first page.
    """

    jobs: List[JobListing] = Field(default_factory=list)
    total: int = 0
    sources: Dict[str, int] = Field(default_factory=dict)

    def to_json(self) -> Dict:
        return {
            "jobs": [j.to_json() for j in self.jobs],
            "total": self.total,
            "sources": dict(self.sources),
        }
