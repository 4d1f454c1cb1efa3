"""Tests for merging, filtering, dedup, sorting and paging."""

import asyncio

import pytest

from conftest import ARBEITNOW_HOST, REMOTIVE_HOST, arbeitnow_job, remotive_job
from job_aggregator.aggregator import (
    JobAggregator,
    apply_filters,
    dedupe_listings,
    sort_by_recency,
)
from job_aggregator.models import JobListing, ListingQuery
from job_aggregator.sources import ArbeitnowSource, FetchResult, JobSource, RemotiveSource
from job_aggregator.utils import recency_score


def listing(native_id, source="remotive", **overrides):
    fields = dict(
        id=f"{source}-{native_id}",
        title="Backend Engineer",
        company="Acme",
        location="Remote",
        work_type="remote",
        employment_type="full-time",
        seniority="mid",
        posted_at="Today",
        description="Build APIs.",
        requirements=["x"],
        benefits=["y"],
        apply_url="https://example.com/apply",
        company_reviews_url="https://example.com/reviews",
        tags=[],
        category="Technology",
        source=source,
    )
    fields.update(overrides)
    return JobListing(**fields)


class StaticSource(JobSource):
    """Source stub returning a fixed result and counting calls."""

    def __init__(self, name, listings=(), diagnostic=None, raises=None):
        super().__init__(client=None, cache=None)
        self.name = name
        self._listings = list(listings)
        self._diagnostic = diagnostic
        self._raises = raises
        self.queries = []

    async def download(self):
        return []

    def native_id(self, record):
        return ""

    def to_listing(self, record, full=False):
        raise NotImplementedError

    async def fetch(self, query=None):
        self.queries.append(query)
        if self._raises:
            raise self._raises
        return FetchResult(source=self.name, listings=list(self._listings), diagnostic=self._diagnostic)


def test_recency_score():
    assert recency_score("Today") == 0
    assert recency_score("1 day ago") == 1
    assert recency_score("3 days ago") == 3
    assert recency_score("1 week ago") == 7
    assert recency_score("2 weeks ago") == 14
    assert recency_score("1 month ago") == 100
    assert recency_score("5 months ago") == 100
    assert recency_score("Recently") == 100


def test_sort_by_recency_orders_and_keeps_ties_stable():
    jobs = [
        listing("a", posted_at="5 months ago"),
        listing("b", posted_at="2 weeks ago"),
        listing("c", posted_at="Today"),
        listing("d", posted_at="3 days ago"),
        listing("e", posted_at="Today"),
    ]
    assert [j.id for j in sort_by_recency(jobs)] == [
        "remotive-c", "remotive-e", "remotive-d", "remotive-b", "remotive-a",
    ]


def test_dedupe_by_title_and_company_case_insensitive():
    jobs = [
        listing("1"),
        listing("2", source="jsearch", title="BACKEND ENGINEER", company="acme"),
        listing("3", company="Globex"),
    ]
    out = dedupe_listings(jobs)
    assert [j.id for j in out] == ["remotive-1", "remotive-3"]
    # Idempotent: running it again changes nothing.
    assert dedupe_listings(out) == out
    assert dedupe_listings(jobs) == out


def test_text_query_matches_title_company_description_or_tag():
    jobs = [
        listing("title", title="Python Developer"),
        listing("company", title="Analyst", company="PythonSoft"),
        listing("desc", title="Engineer", description="We use python daily"),
        listing("tag", title="Other", description="", tags=["Python"]),
        listing("none", title="Chef", company="Diner", description="Cook", tags=["food"]),
    ]
    out = apply_filters(jobs, ListingQuery(q="PYTHON"))
    assert [j.id for j in out] == ["remotive-title", "remotive-company", "remotive-desc", "remotive-tag"]


def test_location_filter_is_substring():
    jobs = [listing("a", location="Berlin, Germany"), listing("b", location="Austin, TX")]
    assert [j.id for j in apply_filters(jobs, ListingQuery(location="berlin"))] == ["remotive-a"]


def test_facet_filters():
    jobs = [
        listing("r", work_type="remote"),
        listing("h", work_type="hybrid", employment_type="contract"),
        listing("o", work_type="onsite", seniority="senior", category="Design"),
    ]
    assert [j.id for j in apply_filters(jobs, ListingQuery(work_type="remote"))] == ["remotive-r"]
    assert len(apply_filters(jobs, ListingQuery(employment_type="all"))) == 3
    assert [j.id for j in apply_filters(jobs, ListingQuery(employment_type="contract"))] == ["remotive-h"]
    assert [j.id for j in apply_filters(jobs, ListingQuery(seniority="senior"))] == ["remotive-o"]
    assert [j.id for j in apply_filters(jobs, ListingQuery(category="design"))] == ["remotive-o"]


def test_category_filter_skips_uncategorized():
    jobs = [listing("a", category=None), listing("b", category="Other")]
    assert [j.id for j in apply_filters(jobs, ListingQuery(category="other"))] == ["remotive-b"]


def test_duplicate_across_sources_counts_in_total_but_not_jobs():
    agg = JobAggregator([
        StaticSource("remotive", [listing("1")]),
        StaticSource("jsearch", [listing("9", source="jsearch")]),
    ])

    page = asyncio.run(agg.search(ListingQuery()))

    assert page.total == 2
    assert len(page.jobs) == 1
    assert page.jobs[0].id == "remotive-1"
    assert page.sources == {"remotive": 1, "jsearch": 1}


def test_failing_source_does_not_abort_request():
    agg = JobAggregator([
        StaticSource("remotive", [listing("1")]),
        StaticSource("jsearch", raises=RuntimeError("boom")),
        StaticSource("arbeitnow", diagnostic="arbeitnow: API error: 503"),
    ])

    page = asyncio.run(agg.search())

    assert [j.id for j in page.jobs] == ["remotive-1"]
    assert page.sources == {"remotive": 1, "jsearch": 0, "arbeitnow": 0}


def test_sources_count_raw_fetch_sizes_before_filters():
    agg = JobAggregator([
        StaticSource("remotive", [listing("1", work_type="remote"), listing("2", title="Chef", work_type="onsite")]),
    ])

    page = asyncio.run(agg.search(ListingQuery(work_type="onsite")))

    assert page.sources == {"remotive": 2}
    assert page.total == 2
    assert [j.id for j in page.jobs] == ["remotive-2"]


def test_query_is_forwarded_to_sources():
    source = StaticSource("jsearch")
    asyncio.run(JobAggregator([source]).search(ListingQuery(q="nurse")))
    asyncio.run(JobAggregator([source]).search(ListingQuery(q="")))
    assert source.queries == ["nurse", None]


def test_truncation_and_paging():
    jobs = [listing(str(i), title=f"Job {i}") for i in range(5)]
    agg = JobAggregator([StaticSource("remotive", jobs)], max_results=2)

    first = asyncio.run(agg.search(ListingQuery()))
    third = asyncio.run(agg.search(ListingQuery(page=3)))
    beyond = asyncio.run(agg.search(ListingQuery(page=4)))

    assert [j.id for j in first.jobs] == ["remotive-0", "remotive-1"]
    assert first.total == 5
    assert [j.id for j in third.jobs] == ["remotive-4"]
    assert beyond.jobs == [] and beyond.total == 5


@pytest.mark.parametrize("field", ["work_type", "employment_type", "seniority", "category"])
def test_unknown_facet_value_matches_nothing(field):
    agg = JobAggregator([StaticSource("remotive", [listing("1"), listing("2", title="Chef")])])

    page = asyncio.run(agg.search(ListingQuery(**{field: "freelance"})))

    assert page.jobs == []
    assert page.total == 2
    assert page.sources == {"remotive": 2}


def test_cancelled_source_counts_as_empty():
    agg = JobAggregator([
        StaticSource("remotive", [listing("1")]),
        StaticSource("arbeitnow", raises=asyncio.CancelledError()),
    ])

    page = asyncio.run(agg.search())

    assert [j.id for j in page.jobs] == ["remotive-1"]
    assert page.sources == {"remotive": 1, "arbeitnow": 0}


def test_end_to_end_with_real_adapters(upstream, cache):
    upstream.json(REMOTIVE_HOST, {"jobs": [remotive_job(id=1, title="Backend Engineer", company_name="Acme")]})
    upstream.json(ARBEITNOW_HOST, {"data": [
        arbeitnow_job(slug="acme-backend", title="Backend Engineer", company_name="Acme"),
        arbeitnow_job(),
    ]})
    client = upstream.client()
    agg = JobAggregator([RemotiveSource(client, cache), ArbeitnowSource(client, cache)])

    page = asyncio.run(agg.search())

    assert page.total == 3
    assert page.sources == {"remotive": 1, "arbeitnow": 2}
    assert [j.id for j in page.jobs] == ["remotive-1", "arbeitnow-data-engineer-berlin-123"]
    body = page.to_json()
    assert body["jobs"][0]["workType"] == "remote"
    assert body["jobs"][0]["applyUrl"].startswith("https://remotive.com/")
    assert "salary" not in body["jobs"][1]
