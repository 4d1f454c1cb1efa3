"""Shared fixtures: fake upstream payloads, a controllable clock and mock transports."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List

import httpx
import pytest

from job_aggregator.cache import SourceCache


def iso_days_ago(days: float) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def epoch_days_ago(days: float) -> int:
    return int((datetime.now(timezone.utc) - timedelta(days=days)).timestamp())


def remotive_job(**overrides: Any) -> Dict[str, Any]:
    job = {
        "id": 1001,
        "url": "https://remotive.com/remote-jobs/software-dev/backend-engineer-1001",
        "title": "Backend Engineer",
        "company_name": "Acme",
        "company_logo": "https://remotive.com/logo/acme.png",
        "category": "Software Development",
        "tags": ["python", "django"],
        "job_type": "full_time",
        "publication_date": iso_days_ago(0.1),
        "candidate_required_location": "Worldwide",
        "salary": "$100k - $120k",
        "description": "<p>You have 5+ years of experience with Python services.</p><p>We offer health insurance.</p>",
    }
    job.update(overrides)
    return job


def arbeitnow_job(**overrides: Any) -> Dict[str, Any]:
    job = {
        "slug": "data-engineer-berlin-123",
        "company_name": "Globex",
        "title": "Data Engineer",
        "description": "<p>Strong knowledge of SQL and data pipelines is required.</p>",
        "remote": False,
        "url": "https://www.arbeitnow.com/view/data-engineer-berlin-123",
        "tags": ["data"],
        "job_types": ["Part-time"],
        "location": "Berlin",
        "created_at": epoch_days_ago(3),
    }
    job.update(overrides)
    return job


def jsearch_job(**overrides: Any) -> Dict[str, Any]:
    job = {
        "job_id": "abc123==",
        "employer_name": "Initech",
        "employer_logo": None,
        "job_title": "Marketing Manager",
        "job_city": "Austin",
        "job_state": "TX",
        "job_country": "US",
        "job_employment_type": "FULLTIME",
        "job_is_remote": False,
        "job_posted_at_datetime_utc": iso_days_ago(15),
        "job_description": "Own our brand strategy. Hybrid schedule with 2 office days.",
        "job_min_salary": 90000,
        "job_max_salary": 110000,
        "job_salary_currency": "USD",
        "job_salary_period": "YEAR",
        "job_apply_link": "https://initech.example/jobs/1",
        "job_required_skills": ["seo"],
        "job_highlights": {
            "Qualifications": ["3+ years in B2B marketing"],
            "Benefits": ["Dental", "Vision"],
        },
    }
    job.update(overrides)
    return job


def adzuna_job(**overrides: Any) -> Dict[str, Any]:
    job = {
        "id": "4412",
        "title": "Registered Nurse",
        "description": "Hybrid role. Medical and retirement plans included.",
        "company": {"display_name": "Mercy Health"},
        "location": {"display_name": "Columbus, Ohio", "area": ["US", "Ohio"]},
        "salary_min": 70000,
        "contract_time": "part_time",
        "created": "2024-01-05T07:20:13Z",
        "redirect_url": "https://www.adzuna.com/details/4412",
        "category": {"label": "Healthcare & Nursing Jobs"},
    }
    job.update(overrides)
    return job


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class Upstream:
    """Routes requests by host to a handler and records every request it sees."""

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {}

    def route(self, host: str, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes[host] = handler

    def json(self, host: str, payload: Any, status_code: int = 200) -> None:
        self.route(host, lambda request: httpx.Response(status_code, json=payload))

    def fail(self, host: str, status_code: int = 503) -> None:
        self.route(host, lambda request: httpx.Response(status_code, json={"message": "unavailable"}))

    def calls(self, host: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.host)
        if route is None:
            raise httpx.ConnectError(f"no route to {request.url.host}", request=request)
        return route(request)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


REMOTIVE_HOST = "remotive.com"
ARBEITNOW_HOST = "www.arbeitnow.com"
JSEARCH_HOST = "jsearch.p.rapidapi.com"
ADZUNA_HOST = "api.adzuna.com"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> SourceCache:
    return SourceCache(ttl_s=3600, clock=clock)


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()
