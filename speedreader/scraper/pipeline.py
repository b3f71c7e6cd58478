"""URL → Article pipeline.

``load_article`` orchestrates the full path from an untrusted URL string to
an immutable :class:`Article`:

    validate input → guard → bounded fetch → extract

Every expected failure surfaces as a :class:`ScraperError` subclass; no
partial Article is ever returned.
"""

from __future__ import annotations

import threading

from speedreader.scraper.errors import InvalidInput
from speedreader.scraper.extractor import extract_article
from speedreader.scraper.fetcher import fetch_url
from speedreader.scraper.guard import ensure_allowed
from speedreader.scraper.models import Article


def load_article(url: object, cancel_event: threading.Event | None = None) -> Article:
    """Fetch and extract the article at *url*.

    Args:
        url: Caller-supplied URL; anything but a non-empty string is rejected.
        cancel_event: Set it from another thread to abandon the fetch.

    Raises:
        InvalidInput, Forbidden, UpstreamFailure, TooLarge, FetchTimeout,
        ExtractionFailure, FetchCancelled.
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidInput("URL is required")
    url = url.strip()

    ensure_allowed(url)
    raw = fetch_url(url, cancel_event=cancel_event)
    return extract_article(raw)
