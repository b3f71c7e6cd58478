"""Article extraction: turns a :class:`RawPage` into an :class:`Article`."""

from __future__ import annotations

import re

import trafilatura
from bs4 import BeautifulSoup

from speedreader.reader.sync import extract_text_from_html
from speedreader.scraper.errors import ExtractionFailure
from speedreader.scraper.models import Article, RawPage

EXCERPT_LENGTH = 200


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _extract_title(html: str) -> str:
    """Return the text content of the first ``<title>`` tag, or empty string."""
    match = re.search(r"<title[^>]*>([^<]+)</title>", html, re.IGNORECASE)
    if match:
        return match.group(1).strip()
    return ""


def _body_inner_html(html: str) -> str:
    """Strip the ``<html><body>`` wrapper trafilatura puts around its output."""
    soup = BeautifulSoup(html, "html.parser")
    root = soup.body if soup.body is not None else soup
    return root.decode_contents().strip()


def _trafilatura_html(raw: RawPage) -> str:
    content: str | None = trafilatura.extract(
        raw.html,
        output_format="html",
        include_links=True,
        include_images=False,
        include_tables=True,
        include_comments=False,
        url=raw.url,
    )
    if not content:
        return ""
    return _body_inner_html(content)


def _bs4_fallback(html: str) -> str:
    """Return the inner HTML of ``<main>``/``<article>``/``<body>`` with
    scripts, styles and navigation chrome removed."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript", "nav", "footer", "header", "aside", "form"]):
        tag.decompose()
    container = soup.find("main") or soup.find("article") or soup.body or soup
    return container.decode_contents().strip()


def _excerpt(description: str | None, text: str) -> str | None:
    if description:
        return description.strip()
    if not text:
        return None
    if len(text) <= EXCERPT_LENGTH:
        return text
    return text[:EXCERPT_LENGTH].rstrip() + "…"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_article(raw: RawPage) -> Article:
    """Extract the readable article from *raw*.

    Tries ``trafilatura`` first; falls back to a BeautifulSoup heuristic when
    it returns nothing (minimal or unusual pages).  ``plain_text`` is derived
    from the chosen HTML with the synchronizer's text walk so that it
    tokenizes exactly like the markup.

    Raises:
        ExtractionFailure: Neither strategy produced any words.
    """
    html = raw.html
    content = _trafilatura_html(raw)
    text = extract_text_from_html(content) if content else ""

    if not text:
        content = _bs4_fallback(html)
        text = extract_text_from_html(content) if content else ""

    if not text:
        raise ExtractionFailure()

    metadata = trafilatura.extract_metadata(html, default_url=raw.url)
    title = _clean(getattr(metadata, "title", None)) or _clean(_extract_title(html))

    return Article(
        title=title,
        html_content=content,
        plain_text=text,
        excerpt=_excerpt(getattr(metadata, "description", None), text),
        byline=_clean(getattr(metadata, "author", None)),
        site_name=_clean(getattr(metadata, "sitename", None)),
    )
