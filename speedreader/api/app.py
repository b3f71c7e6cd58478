"""FastAPI application factory.

Routers
-------
    /api/extract  — guarded fetch + article extraction
    /health       — liveness probe

Errors are always answered as ``{"error": "<message>"}``; malformed request
bodies (missing or non-string ``url``) are a 400, not FastAPI's default 422,
because 422 is reserved for "nothing extractable".
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from speedreader.config import settings
from speedreader.scraper.errors import ScraperError

from speedreader.api.routers import extract as extract_router


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "URL is required"})


async def _scraper_error_handler(request: Request, exc: ScraperError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Speed Reader API",
        description=(
            "Extracts readable article content from a URL behind an SSRF "
            "guard, for paced one-word-at-a-time reading."
        ),
        version="0.1.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(ScraperError, _scraper_error_handler)

    app.include_router(extract_router.router, prefix="/api/extract", tags=["extract"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    return app


# Module-level instance used by an ASGI server:
#   uvicorn speedreader.api.app:app --reload
app = create_app()
