"""Runtime settings read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping


class ConfigError(Exception):
    """Raised when an environment variable holds an invalid value."""


@dataclass
class Settings:
    github_token: str | None = None
    api_base: str = "https://api.github.com"
    generation_url: str | None = None
    generation_key: str | None = None
    gemini_api_key: str | None = None
    gemini_model: str | None = None
    max_workers: int = 4
    timeout: float = 30.0
    log_level: str = "INFO"


def _get(environ: Mapping[str, str], key: str) -> str | None:
    value = environ.get(key, "").strip()
    return value or None


def _get_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = _get(environ, key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc
    if value < 1:
        raise ConfigError(f"{key} must be at least 1, got {value}")
    return value


def _get_float(environ: Mapping[str, str], key: str, default: float) -> float:
    raw = _get(environ, key)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from *environ* (defaults to ``os.environ``)."""
    if environ is None:
        environ = os.environ
    defaults = Settings()
    return Settings(
        github_token=_get(environ, "GITHUB_TOKEN"),
        api_base=_get(environ, "REPOSCRIBE_API_BASE") or defaults.api_base,
        generation_url=_get(environ, "REPOSCRIBE_GENERATION_URL"),
        generation_key=_get(environ, "REPOSCRIBE_GENERATION_KEY"),
        gemini_api_key=_get(environ, "GEMINI_API_KEY"),
        gemini_model=_get(environ, "REPOSCRIBE_GEMINI_MODEL"),
        max_workers=_get_int(environ, "REPOSCRIBE_MAX_WORKERS", defaults.max_workers),
        timeout=_get_float(environ, "REPOSCRIBE_TIMEOUT", defaults.timeout),
        log_level=(_get(environ, "REPOSCRIBE_LOG_LEVEL") or defaults.log_level).upper(),
    )
