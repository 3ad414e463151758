# engineshed/config.py
"""
Runtime configuration read from environment variables.

Credentials for the two outbound services (Google Custom Search for
images, OpenAI-compatible chat completions for the AI guess) are only
read here. Missing keys are not an error at startup: the first call that
needs them fails with a readable message instead.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_SEARCH_API_URL = "https://www.googleapis.com/customsearch/v1"
DEFAULT_DATA_FILE = Path(__file__).resolve().parent / "data" / "thomas_characters.json"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

logger = logging.getLogger(__name__)


class Settings(BaseModel):
    google_api_key: str = ""
    google_cx: str = ""
    google_search_api_url: str = DEFAULT_SEARCH_API_URL
    image_search_timeout: float = Field(default=10.0, gt=0)

    openai_api_key: str = ""
    openai_base_url: Optional[str] = None
    openai_model: str = "gpt-3.5-turbo"

    # "openai" or "local"
    guess_backend: str = "openai"
    local_llm_model: str = "google/flan-t5-base"

    data_file: Path = DEFAULT_DATA_FILE
    log_level: str = "INFO"

    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Malformed values fall back to their defaults with a warning so
        that a typo in the environment never stops the app from importing.
        """
        env = os.environ
        return cls(
            google_api_key=env.get("GOOGLE_API_KEY", ""),
            google_cx=env.get("GOOGLE_CX", ""),
            google_search_api_url=env.get("GOOGLE_SEARCH_API_URL") or DEFAULT_SEARCH_API_URL,
            image_search_timeout=_positive_number(env, "IMAGE_SEARCH_TIMEOUT", 10.0, float),
            openai_api_key=env.get("OPENAI_API_KEY", ""),
            openai_base_url=env.get("OPENAI_BASE_URL") or None,
            openai_model=env.get("OPENAI_MODEL") or "gpt-3.5-turbo",
            guess_backend=(env.get("GUESS_BACKEND") or "openai").strip().lower(),
            local_llm_model=env.get("LOCAL_LLM_MODEL") or "google/flan-t5-base",
            data_file=Path(env.get("TRAINS_DATA_FILE") or DEFAULT_DATA_FILE),
            log_level=_log_level(env.get("ENGINESHED_LOG_LEVEL")),
            host=env.get("ENGINESHED_HOST") or "127.0.0.1",
            port=_port(env.get("ENGINESHED_PORT")),
        )


def _positive_number(env, name: str, default, kind):
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = kind(raw)
    except ValueError:
        value = None
    if value is None or not value > 0:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    return value


def _port(raw: Optional[str]) -> int:
    port = _positive_number({"ENGINESHED_PORT": raw}, "ENGINESHED_PORT", 8000, int)
    if port >= 65536:
        logger.warning("Ignoring invalid ENGINESHED_PORT=%r, using 8000", raw)
        return 8000
    return port


def _log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").strip().upper()
    if level not in LOG_LEVELS:
        logger.warning("Ignoring invalid ENGINESHED_LOG_LEVEL=%r, using INFO", raw)
        return "INFO"
    return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
