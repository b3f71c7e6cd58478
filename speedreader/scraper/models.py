"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class RawPage:
    """The bounded HTTP response body for a single URL fetch."""

    url: str
    content: bytes
    status_code: int
    encoding: str | None = None

    @property
    def html(self) -> str:
        """Decode the body with the declared charset, falling back to UTF-8."""
        encoding = self.encoding or "utf-8"
        try:
            return self.content.decode(encoding, errors="replace")
        except LookupError:
            # Unknown charset label in the Content-Type header.
            return self.content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Article:
    """Readable article content, produced once per successful extraction."""

    title: str | None
    html_content: str
    plain_text: str
    excerpt: str | None = None
    byline: str | None = None
    site_name: str | None = None

    def to_response(self) -> dict[str, str | None]:
        """Serialise to the JSON shape returned by ``POST /api/extract``."""
        return {
            "title": self.title,
            "content": self.html_content,
            "textContent": self.plain_text,
            "excerpt": self.excerpt,
            "byline": self.byline,
            "siteName": self.site_name,
        }
