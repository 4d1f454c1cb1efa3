"""Per-board source connectors, in aggregation order."""

from __future__ import annotations

from typing import List

import httpx

from ..cache import SourceCache
from ..config import Settings
from .adzuna import AdzunaSource
from .arbeitnow import ArbeitnowSource
from .base import FetchResult, JobSource
from .jsearch import JSearchSource
from .remotive import RemotiveSource

__all__ = [
    "AdzunaSource",
    "ArbeitnowSource",
    "FetchResult",
    "JSearchSource",
    "JobSource",
    "RemotiveSource",
    "build_sources",
]


def build_sources(client: httpx.AsyncClient, cache: SourceCache, settings: Settings) -> List[JobSource]:
    """Instantiate every connector; credential-gated ones are disabled when unconfigured."""
    return [
        RemotiveSource(client, cache),
        JSearchSource(
            client,
            cache,
            api_key=settings.RAPIDAPI_KEY,
            categories_per_cycle=settings.JSEARCH_CATEGORIES_PER_CYCLE,
        ),
        ArbeitnowSource(client, cache),
        AdzunaSource(client, cache, app_id=settings.ADZUNA_APP_ID, app_key=settings.ADZUNA_APP_KEY),
    ]
