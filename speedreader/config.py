"""Centralised settings for the speed reader backend.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from this package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT", "30.0"))
    )
    max_response_bytes: int = field(
        default_factory=lambda: int(
            os.environ.get("MAX_RESPONSE_BYTES", str(5 * 1024 * 1024))
        )
    )
    max_redirects: int = field(
        default_factory=lambda: int(os.environ.get("MAX_REDIRECTS", "5"))
    )
    user_agent: str = field(
        default_factory=lambda: os.environ.get(
            "SPEEDREADER_USER_AGENT",
            "Mozilla/5.0 (compatible; SpeedReader/1.0; +https://github.com/speedreader)",
        )
    )

    # ------------------------------------------------------------------
    # Pacing (delays are expressed at the 250 wpm reference rate)
    # ------------------------------------------------------------------
    default_wpm: int = field(
        default_factory=lambda: int(os.environ.get("DEFAULT_WPM", "300"))
    )
    sentence_end_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("SENTENCE_END_DELAY_MS", "500"))
    )
    speech_break_delay_ms: int = field(
        default_factory=lambda: int(os.environ.get("SPEECH_BREAK_DELAY_MS", "250"))
    )
    min_word_delay_ms: int = 30

    # ------------------------------------------------------------------
    # Service
    # ------------------------------------------------------------------
    log_level: str = field(
        default_factory=lambda: os.environ.get("LOG_LEVEL", "INFO")
    )
    cors_origins: list[str] = field(
        default_factory=lambda: [
            origin.strip()
            for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
            if origin.strip()
        ]
    )


# Module-level singleton; import this everywhere:
#   from speedreader.config import settings
settings = Settings()
