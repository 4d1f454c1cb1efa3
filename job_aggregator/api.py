"""
Job Aggregator - FastAPI service
================================
  GET /api/jobs          → merged, filtered, deduplicated listings from every board
  GET /api/jobs/{job_id} → one fully expanded listing, resolved by id prefix
  GET /api/health        → liveness and the configured sources

Run:
  python -m job_aggregator.api
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional, Sequence

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .aggregator import ALL, JobAggregator
from .cache import SourceCache
from .config import Settings
from .errors import InvalidJobId, JobNotFound
from .models import ListingQuery
from .resolver import JobResolver
from .sources import JobSource, build_sources

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, sources: Optional[Sequence[JobSource]] = None) -> FastAPI:
    """Build the application.

    The HTTP client and the source cache are created here, once per process, and shared
    by every request. Pass `sources` to run against pre-built connectors (tests).
    """
    settings = settings or Settings()
    client: Optional[httpx.AsyncClient] = None

    if sources is None:
        client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS, follow_redirects=True)
        cache = SourceCache(ttl_s=settings.CACHE_TTL_SECONDS)
        sources = build_sources(client, cache, settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        enabled = [s.name for s in sources if s.enabled]
        logger.info("Job aggregator starting; enabled sources: %s", ", ".join(enabled) or "none")
        yield
        if client is not None:
            await client.aclose()

    app = FastAPI(title="Job Aggregator", version="1.0.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.aggregator = JobAggregator(sources, max_results=settings.MAX_RESULTS)
    app.state.resolver = JobResolver(sources)

    response_headers = {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type",
        "Cache-Control": settings.EDGE_CACHE_CONTROL,
    }

    # ─────────────────────────────────────────────
    #  CORS / caching headers
    # ─────────────────────────────────────────────
    @app.middleware("http")
    async def add_response_headers(request: Request, call_next):
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        response.headers.update(response_headers)
        return response

    # ─────────────────────────────────────────────
    #  Error envelope: {"error": "..."}
    # ─────────────────────────────────────────────
    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        message = "Method not allowed" if exc.status_code == 405 else str(exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"error": message}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        errors = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg', '')}" for e in exc.errors()
        )
        return JSONResponse(status_code=400, content={"error": f"Invalid request: {errors}"})

    # ─────────────────────────────────────────────
    #  Routes
    # ─────────────────────────────────────────────
    @app.get("/api/jobs")
    async def list_jobs(
        request: Request,
        q: Optional[str] = None,
        location: Optional[str] = None,
        work_type: Optional[str] = Query(None, alias="workType"),
        employment_type: Optional[str] = Query(None, alias="employmentType"),
        seniority: Optional[str] = None,
        category: Optional[str] = None,
        page: int = Query(1, ge=1),
    ):
        query = ListingQuery(
            q=q or None,
            location=location or None,
            work_type=work_type or ALL,
            employment_type=employment_type or ALL,
            seniority=seniority or ALL,
            category=category or ALL,
            page=page,
        )
        try:
            result = await request.app.state.aggregator.search(query)
        except Exception:
            logger.exception("API Error")
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to fetch jobs", "jobs": [], "total": 0, "sources": {}},
            )
        return result.to_json()

    @app.get("/api/jobs/{job_id}")
    async def get_job(request: Request, job_id: str):
        try:
            job = await request.app.state.resolver.resolve(job_id)
        except InvalidJobId as exc:
            return JSONResponse(status_code=400, content={"error": str(exc)})
        except JobNotFound as exc:
            return JSONResponse(status_code=404, content={"error": exc.message})
        except Exception:
            logger.exception("API Error")
            return JSONResponse(status_code=500, content={"error": "Failed to fetch job"})
        return {"job": job.to_json()}

    @app.get("/api/health")
    async def health(request: Request):
        return {
            "status": "ok",
            "sources": {s.name: s.enabled for s in request.app.state.aggregator.sources},
        }

    return app


def main() -> None:
    import uvicorn

    settings = Settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    uvicorn.run(create_app(settings), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    main()
