"""Exceptions raised across the aggregator.

`UpstreamError` never leaves an adapter; the others map to 4xx responses.
"""

from __future__ import annotations


class AggregatorError(Exception):
    """Base class for aggregator errors."""


class UpstreamError(AggregatorError):
    """An upstream board returned a non-2xx status, failed to connect, or sent junk."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source


class InvalidJobId(AggregatorError):
    """The job id is missing or malformed."""


class JobNotFound(AggregatorError):
    """The id is well-formed but no source can produce a matching record."""

    def __init__(self, message: str = "Job not found") -> None:
        super().__init__(message)
        self.message = message
