"""CLI entry point.

This script runs one aggregation cycle across all configured boards and writes the same
JSON envelope the `/api/jobs` endpoint returns ({"jobs", "total", "sources"}) to disk.

Examples:
    python run_fetch.py --out jobs.json
    python run_fetch.py --out jobs.json --query "backend" --work-type remote
    python run_fetch.py --out jobs.json --location berlin --seniority senior

Credentials for the optional boards are read from the environment / `.env`.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

import httpx

from job_aggregator.aggregator import ALL, JobAggregator
from job_aggregator.cache import SourceCache
from job_aggregator.config import Settings
from job_aggregator.models import EMPLOYMENT_TYPES, SENIORITIES, WORK_TYPES, ListingPage, ListingQuery
from job_aggregator.sources import build_sources


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Fetch, normalize and merge jobs from multiple boards.")
    p.add_argument("--out", type=str, default="jobs.json", help="Output JSON file path.")
    p.add_argument("--query", type=str, default=None, help="Free-text search (also sent to search APIs).")
    p.add_argument("--location", type=str, default=None, help="Location substring filter.")
    p.add_argument("--work-type", choices=[ALL, *WORK_TYPES], default=ALL)
    p.add_argument("--employment-type", choices=[ALL, *EMPLOYMENT_TYPES], default=ALL)
    p.add_argument("--seniority", choices=[ALL, *SENIORITIES], default=ALL)
    p.add_argument("--category", type=str, default=ALL, help="Category label, e.g. Technology.")
    p.add_argument("--page", type=int, default=1, help="1-based result page.")
    return p.parse_args(argv)


def build_query(args: argparse.Namespace) -> ListingQuery:
    return ListingQuery(
        q=args.query or None,
        location=args.location or None,
        work_type=args.work_type,
        employment_type=args.employment_type,
        seniority=args.seniority,
        category=args.category,
        page=args.page,
    )


async def run(query: ListingQuery, settings: Settings) -> ListingPage:
    cache = SourceCache(ttl_s=settings.CACHE_TTL_SECONDS)
    async with httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True) as client:
        aggregator = JobAggregator(build_sources(client, cache, settings), max_results=settings.MAX_RESULTS)
        return await aggregator.search(query)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    page = asyncio.run(run(build_query(args), settings))

    out_path = Path(args.out).expanduser().resolve()
    out_path.parent.mkdir(parents=True, exist_ok=True)
    data = page.to_json()
    out_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    print(f"Wrote {len(data['jobs'])} jobs ({data['total']} fetched) to: {out_path}")


if __name__ == "__main__":
    main()
