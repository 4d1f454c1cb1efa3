"""Single-job resolver.

Composite ids look like `<source>-<native id>`. The prefix picks the source, which
resolves the native id through its own detail path (an endpoint call for JSearch, a
scan of the cached listing for the boards without one).
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Sequence, Tuple

from .errors import InvalidJobId, JobNotFound
from .models import JobListing
from .sources.base import JobSource

logger = logging.getLogger(__name__)

# Ids from before source prefixes existed were bare Remotive ids.
LEGACY_SOURCE = "remotive"
APPLY_LINK_HINT = "Please use the apply link to view this job"


class JobResolver:
    """Resolve a composite id to one fully expanded `JobListing`."""

    def __init__(self, sources: Sequence[JobSource]) -> None:
        self._sources: Dict[str, JobSource] = {s.name: s for s in sources}

    def parse_id(self, job_id: Optional[str]) -> Tuple[Optional[JobSource], str]:
        """Split a composite id into (source, native id). Source is None for unknown prefixes."""
        if not job_id or not isinstance(job_id, str) or not job_id.strip():
            raise InvalidJobId("Job ID is required")

        job_id = job_id.strip()
        prefix, sep, native = job_id.partition("-")
        if sep and prefix in self._sources:
            if not native:
                raise InvalidJobId(f"Job ID '{job_id}' has no native id after the source prefix")
            return self._sources[prefix], native
        return None, job_id

    async def resolve(self, job_id: Optional[str]) -> JobListing:
        source, native = self.parse_id(job_id)

        if source is None:
            legacy = self._sources.get(LEGACY_SOURCE)
            if legacy is None or not native.isdigit():
                raise JobNotFound()
            source = legacy

        if not source.supports_lookup:
            raise JobNotFound(APPLY_LINK_HINT)

        job = await source.fetch_one(native)
        if job is None:
            logger.info("Job %s not found in %s", job_id, source.name)
            raise JobNotFound()
        return job
