"""Scraper package — guarded fetch & article extraction."""

from speedreader.scraper.errors import ScraperError
from speedreader.scraper.extractor import extract_article
from speedreader.scraper.fetcher import fetch_url
from speedreader.scraper.guard import check_url, ensure_allowed
from speedreader.scraper.models import Article, RawPage
from speedreader.scraper.pipeline import load_article

__all__ = [
    "check_url",
    "ensure_allowed",
    "fetch_url",
    "extract_article",
    "load_article",
    "Article",
    "RawPage",
    "ScraperError",
]
