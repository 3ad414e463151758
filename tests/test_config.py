"""Tests for environment-driven settings and the uvicorn entry point."""

from unittest.mock import patch

import pytest

from engineshed import __main__ as entry
from engineshed.config import DEFAULT_SEARCH_API_URL, Settings

ENV_VARS = [
    "GOOGLE_API_KEY", "GOOGLE_CX", "GOOGLE_SEARCH_API_URL", "IMAGE_SEARCH_TIMEOUT",
    "OPENAI_API_KEY", "OPENAI_BASE_URL", "OPENAI_MODEL", "GUESS_BACKEND",
    "LOCAL_LLM_MODEL", "TRAINS_DATA_FILE", "ENGINESHED_LOG_LEVEL",
    "ENGINESHED_HOST", "ENGINESHED_PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.google_search_api_url == DEFAULT_SEARCH_API_URL
    assert settings.image_search_timeout == 10.0
    assert settings.guess_backend == "openai"
    assert settings.log_level == "INFO"
    assert settings.port == 8000


def test_values_from_env(clean_env):
    clean_env.setenv("GOOGLE_API_KEY", "k")
    clean_env.setenv("IMAGE_SEARCH_TIMEOUT", "2.5")
    clean_env.setenv("GUESS_BACKEND", " Local ")
    clean_env.setenv("ENGINESHED_LOG_LEVEL", "debug")
    clean_env.setenv("ENGINESHED_PORT", "9000")

    settings = Settings.from_env()

    assert settings.google_api_key == "k"
    assert settings.image_search_timeout == 2.5
    assert settings.guess_backend == "local"
    assert settings.log_level == "DEBUG"
    assert settings.port == 9000


@pytest.mark.parametrize("name,value,field,default", [
    ("IMAGE_SEARCH_TIMEOUT", "ten", "image_search_timeout", 10.0),
    ("IMAGE_SEARCH_TIMEOUT", "-1", "image_search_timeout", 10.0),
    ("IMAGE_SEARCH_TIMEOUT", "nan", "image_search_timeout", 10.0),
    ("ENGINESHED_LOG_LEVEL", "LOUD", "log_level", "INFO"),
    ("ENGINESHED_PORT", "http", "port", 8000),
    ("ENGINESHED_PORT", "70000", "port", 8000),
])
def test_invalid_values_fall_back(clean_env, caplog, name, value, field, default):
    clean_env.setenv(name, value)

    settings = Settings.from_env()

    assert getattr(settings, field) == default
    assert name in caplog.text


def test_main_runs_uvicorn():
    settings = Settings(host="0.0.0.0", port=8123, log_level="WARNING")
    with patch("engineshed.__main__.get_settings", return_value=settings), \
            patch("engineshed.__main__.uvicorn.run") as run:
        entry.main()
    run.assert_called_once_with("engineshed.main:app", host="0.0.0.0", port=8123, log_level="warning")
