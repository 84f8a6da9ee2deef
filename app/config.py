"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parents[1]
_ALLOWED_LLM_ADAPTERS = {"openai", "mock", "none"}


def load_env_files() -> None:
    """
    Load simple KEY=VALUE pairs from `.env` and `.env.local` (if present).
    Existing process environment variables are not overwritten.
    """

    for filename in (".env", ".env.local"):
        env_path = _PROJECT_ROOT / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class DatasetSettings:
    """
    Where the sustainability CSV lives and how its ingestion reports issues.
    """

    source: str = "data/WorldSustainabilityDataset.csv"
    max_parse_warnings: int = 500
    log_parse_warnings: bool = True


@dataclass(frozen=True)
class ExternalHTTPSettings:
    """
    HTTP behavior settings for remote dataset fetches.
    """

    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0


@dataclass(frozen=True)
class LLMSettings:
    """
    Optional generative summarizer settings.

    ``adapter="none"`` or a missing API key selects the local summarizer.
    """

    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    max_tokens: int = 2048
    api_key: str | None = None
    base_url: str | None = None
    max_retries: int = 2

    @property
    def enabled(self) -> bool:
        if self.adapter == "mock":
            return True
        return self.adapter == "openai" and bool(self.api_key)


@lru_cache(maxsize=1)
def get_dataset_settings() -> DatasetSettings:
    """
    Return cached dataset settings from environment variables.
    """

    return DatasetSettings(
        source=_get_str_env("DATASET_SOURCE", "data/WorldSustainabilityDataset.csv"),
        max_parse_warnings=max(1, _get_int_env("DATASET_MAX_PARSE_WARNINGS", 500)),
        log_parse_warnings=_get_bool_env("DATASET_LOG_PARSE_WARNINGS", True),
    )


@lru_cache(maxsize=1)
def get_external_http_settings() -> ExternalHTTPSettings:
    """
    Return shared HTTP settings from environment variables.
    """

    return ExternalHTTPSettings(
        timeout_seconds=max(1.0, _get_float_env("EXTERNAL_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("EXTERNAL_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("EXTERNAL_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("EXTERNAL_HTTP_BACKOFF_MULTIPLIER", 2.0)),
    )


@lru_cache(maxsize=1)
def get_llm_settings() -> LLMSettings:
    """
    Return summarizer settings from environment variables.

    Unknown LLM_ADAPTER values fall back to ``"none"``.
    """

    adapter = _get_str_env("LLM_ADAPTER", "openai").lower()
    if adapter not in _ALLOWED_LLM_ADAPTERS:
        adapter = "none"
    return LLMSettings(
        adapter=adapter,
        model=_get_str_env("LLM_MODEL", "gpt-4o-mini"),
        max_tokens=max(1, _get_int_env("LLM_MAX_TOKENS", 2048)),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        max_retries=max(0, _get_int_env("LLM_MAX_RETRIES", 2)),
    )
