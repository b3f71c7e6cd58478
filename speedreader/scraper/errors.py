"""Failure taxonomy for the fetch → extract pipeline.

Every expected failure is a :class:`ScraperError` subclass carrying a
human-readable ``message`` and the HTTP ``status_code`` the API layer answers
with.  Anything that is *not* a ``ScraperError`` is treated as unexpected.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for all expected pipeline failures."""

    status_code: int = 500
    default_message: str = "Failed to extract article"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ScraperError):
    """Missing or malformed URL, or a scheme other than http/https."""

    status_code = 400
    default_message = "URL is required"


class Forbidden(ScraperError):
    """The URL Safety Guard rejected the target."""

    status_code = 400
    default_message = "URL is not allowed"


class UpstreamFailure(ScraperError):
    """Non-2xx upstream status or a network-level error."""

    status_code = 502
    default_message = "Failed to fetch"

    def __init__(self, message: str | None = None, upstream_status: int | None = None) -> None:
        self.upstream_status = upstream_status
        super().__init__(message)


class TooLarge(ScraperError):
    status_code = 413
    default_message = "Response too large"


class FetchTimeout(ScraperError):
    status_code = 504
    default_message = "Request timed out"


class ExtractionFailure(ScraperError):
    status_code = 422
    default_message = "Could not extract article content"


class FetchCancelled(ScraperError):
    """The caller abandoned the fetch; partial bytes were discarded."""

    default_message = "Request was cancelled"
