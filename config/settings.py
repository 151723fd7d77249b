from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv


load_dotenv()

logger = logging.getLogger(__name__)


def _optional_float(name: str) -> Optional[float]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return None


def _log_level(name: str, default: str = "INFO") -> str:
    raw = (os.getenv(name) or default).strip().upper()
    if not isinstance(logging.getLevelName(raw), int):
        logger.warning("Ignoring unknown %s=%r, using %s", name, raw, default)
        return default
    return raw


class Settings:
    """Application settings loaded from environment variables.

    The Gemini key is looked up on every access so a missing key only
    fails the outbound call, never startup. Unparseable values fall back
    to their defaults.
    """

    app_env: str = os.getenv("APP_ENV", "development")
    log_level: str = _log_level("LOG_LEVEL")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash-latest")
    gemini_api_base: str = os.getenv(
        "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
    )
    gemini_timeout: Optional[float] = _optional_float("GEMINI_TIMEOUT")

    @property
    def gemini_api_key(self) -> Optional[str]:
        return os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY") or None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
