"""Error types for nba-data flows."""

from __future__ import annotations


class NBADataError(RuntimeError):
    """Base error for nba-data operations."""


class UpstreamError(NBADataError):
    """Raised when the upstream stats API cannot serve a request."""


class MissingAPIKeyError(UpstreamError):
    """Raised when no API key is configured for the upstream stats API."""
