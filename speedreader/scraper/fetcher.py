"""Bounded HTTP fetcher for untrusted remote content.

The body is streamed and capped twice over: a declared ``Content-Length``
above the ceiling fails before any body byte is read, and the running byte
count aborts the stream the moment it passes the ceiling (servers may omit or
lie about the header).  Redirects are followed by hand so every hop goes back
through the URL Safety Guard.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

import httpx

from speedreader.config import settings
from speedreader.scraper.errors import (
    FetchCancelled,
    FetchTimeout,
    Forbidden,
    ScraperError,
    TooLarge,
    UpstreamFailure,
)
from speedreader.scraper.guard import GuardVerdict, check_url
from speedreader.scraper.models import RawPage

logger = logging.getLogger(__name__)


def _default_headers() -> dict[str, str]:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml;q=0.9,*/*;q=0.5",
    }


def _declared_length(response: httpx.Response) -> int | None:
    """Return the ``Content-Length`` header as an int, or ``None`` if unusable."""
    raw = response.headers.get("content-length")
    if raw is None:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def _remaining(deadline: float) -> float:
    """Seconds left before *deadline*; raises once it has passed."""
    remaining = deadline - time.monotonic()
    if remaining <= 0:
        raise FetchTimeout()
    return remaining


def _read_bounded(
    response: httpx.Response,
    max_bytes: int,
    deadline: float,
    cancel_event: threading.Event | None,
) -> bytes:
    """Stream *response* into memory, aborting past *max_bytes* or *deadline*."""
    body = bytearray()
    for chunk in response.iter_bytes():
        if cancel_event is not None and cancel_event.is_set():
            raise FetchCancelled()
        _remaining(deadline)
        if len(body) + len(chunk) > max_bytes:
            raise TooLarge()
        body.extend(chunk)
    _remaining(deadline)
    return bytes(body)


def fetch_url(
    url: str,
    *,
    max_bytes: int | None = None,
    timeout: float | None = None,
    cancel_event: threading.Event | None = None,
    guard: Callable[[str], GuardVerdict] = check_url,
    transport: httpx.BaseTransport | None = None,
) -> RawPage:
    """Fetch a guard-approved *url* and return its bounded body.

    Args:
        url: Target URL; the caller is expected to have run the guard on it.
        max_bytes: Body ceiling; defaults to ``settings.max_response_bytes``.
        timeout: Overall deadline in seconds; defaults to
            ``settings.fetch_timeout``.
        cancel_event: When set by another thread, the stream is abandoned.
        guard: Validator applied to every redirect target.
        transport: Optional ``httpx`` transport (tests inject a mock here).

    Raises:
        UpstreamFailure: Non-2xx status, network error or redirect loop.
        TooLarge: Declared or streamed size above the ceiling.
        FetchTimeout: The deadline expired.
        Forbidden: A redirect pointed at a blocked target.
        FetchCancelled: *cancel_event* was set mid-fetch.
    """
    max_bytes = settings.max_response_bytes if max_bytes is None else max_bytes
    timeout = settings.fetch_timeout if timeout is None else timeout
    deadline = time.monotonic() + timeout

    current = httpx.URL(url)
    try:
        with httpx.Client(
            headers=_default_headers(),
            timeout=timeout,
            follow_redirects=False,
            transport=transport,
        ) as client:
            for _hop in range(settings.max_redirects + 1):
                # Each hop only gets what is left of the overall budget.
                budget = httpx.Timeout(_remaining(deadline))
                with client.stream("GET", current, timeout=budget) as response:
                    _remaining(deadline)
                    if response.is_redirect:
                        location = response.headers.get("location", "")
                        current = response.url.join(location)
                        verdict = guard(str(current))
                        if not verdict.allowed:
                            logger.info("Redirect to %s blocked: %s", current, verdict.reason)
                            raise Forbidden(verdict.reason)
                        continue

                    if not response.is_success:
                        reason = response.reason_phrase or str(response.status_code)
                        raise UpstreamFailure(
                            f"Failed to fetch: {reason}",
                            upstream_status=response.status_code,
                        )

                    declared = _declared_length(response)
                    if declared is not None and declared > max_bytes:
                        raise TooLarge()

                    content = _read_bounded(response, max_bytes, deadline, cancel_event)
                    return RawPage(
                        url=str(response.url),
                        content=content,
                        status_code=response.status_code,
                        encoding=response.charset_encoding,
                    )
    except ScraperError as exc:
        logger.warning("Fetch of %s failed: %s", url, exc.message)
        raise
    except httpx.TimeoutException as exc:
        logger.warning("Fetch of %s timed out", url)
        raise FetchTimeout() from exc
    except httpx.HTTPError as exc:
        logger.warning("Fetch of %s failed: %s", url, exc)
        raise UpstreamFailure(f"Failed to fetch: {exc}") from exc

    raise UpstreamFailure("Failed to fetch: too many redirects")
