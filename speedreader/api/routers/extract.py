"""Article extraction endpoint.

Routes
------
POST /api/extract    Body: {"url": "https://..."}    → extract_endpoint

Status codes: 200 article, 400 invalid or blocked URL, 413 response too
large, 422 nothing extractable, 502 upstream failure, 504 timeout,
500 anything else.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, StrictStr

from speedreader.reader.sync import wrap_words_in_html
from speedreader.scraper.errors import ScraperError
from speedreader.scraper.pipeline import load_article

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class ExtractRequest(BaseModel):
    url: StrictStr
    wrap: bool = False


class ArticleResponse(BaseModel):
    title: Optional[str]
    content: str
    textContent: str
    excerpt: Optional[str]
    byline: Optional[str]
    siteName: Optional[str]


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("", response_model=ArticleResponse)
def extract_endpoint(body: ExtractRequest) -> Any:
    """Fetch the URL behind the SSRF guard and return its readable article.

    With ``wrap`` set, ``content`` comes back with every word wrapped in a
    ``data-word-index`` span matching the tokens of ``textContent``.
    """
    try:
        article = load_article(body.url)
    except ScraperError:
        # Rendered by the app-level ScraperError handler.
        raise
    except Exception as exc:
        logger.exception("Article extraction error for %s", body.url)
        return error_response(500, str(exc) or "Failed to extract article")

    payload = article.to_response()
    if body.wrap:
        payload["content"] = wrap_words_in_html(article.html_content)
    return payload
