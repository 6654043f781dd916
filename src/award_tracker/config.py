"""
Environment-backed configuration.

Values are read at call time (not import time) so each request sees the current
environment and tests can swap values with `monkeypatch.setenv`. Required values
raise `ConfigurationError` naming the missing variable.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import load_dotenv

from .errors import ConfigurationError

DEFAULT_COMPLETIONS_URL = "https://developer.osv.engineering/inference/v1/chat/completions"
DEFAULT_MODEL = "anthropic/claude-sonnet-4-5-20250929"
DEFAULT_MAX_TOKENS = 2000
DEFAULT_AIRTABLE_API_URL = "https://api.airtable.com/v0"


def _repo_root() -> Path:
    # `src/award_tracker/config.py` -> repo root
    return Path(__file__).resolve().parents[2]


def load_env_files() -> None:
    """Load `.env` + `.env.local` when present (local dev convenience). Real env wins."""
    load_dotenv(_repo_root() / ".env", override=False)
    load_dotenv(_repo_root() / ".env.local", override=False)


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or "").strip() or default


def _env_bool(name: str, default: bool = False) -> bool:
    v = (os.getenv(name) or "").strip().lower()
    if not v:
        return default
    return v in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        return None


def _env_csv(name: str) -> List[str]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return []
    return [t.strip() for t in raw.split(",") if t.strip()]


def _env_column_overrides(name: str) -> Dict[str, str]:
    """Parse `field=Column,field2=Column 2` into a dict; malformed items are ignored."""
    out: Dict[str, str] = {}
    for item in _env_csv(name):
        key, sep, column = item.partition("=")
        if sep and key.strip() and column.strip():
            out[key.strip()] = column.strip()
    return out


def _require(name: str) -> str:
    value = (os.getenv(name) or "").strip()
    if not value:
        raise ConfigurationError(name)
    return value


@dataclass(frozen=True)
class InferenceConfig:
    api_key: str
    completions_url: str = DEFAULT_COMPLETIONS_URL
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "InferenceConfig":
        return cls(
            api_key=_require("ANTHROPIC_API_KEY"),
            completions_url=_env_str("AI_COMPLETIONS_URL", DEFAULT_COMPLETIONS_URL),
            model=_env_str("AI_MODEL", DEFAULT_MODEL),
            max_tokens=_env_int("AI_MAX_TOKENS", DEFAULT_MAX_TOKENS),
            timeout=_env_float("HTTP_TIMEOUT_SECONDS"),
        )


@dataclass(frozen=True)
class StoreConfig:
    api_key: str
    base_id: str
    api_url: str = DEFAULT_AIRTABLE_API_URL
    awards_table: str = "Awards"
    requirements_table: str = "Requirements"
    award_columns: Dict[str, str] = field(default_factory=dict)
    requirement_columns: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls) -> "StoreConfig":
        return cls(
            api_key=_require("AIRTABLE_API_KEY"),
            base_id=_require("AIRTABLE_BASE_ID"),
            api_url=_env_str("AIRTABLE_API_URL", DEFAULT_AIRTABLE_API_URL).rstrip("/"),
            awards_table=_env_str("AIRTABLE_AWARDS_TABLE", "Awards"),
            requirements_table=_env_str("AIRTABLE_REQUIREMENTS_TABLE", "Requirements"),
            award_columns=_env_column_overrides("AIRTABLE_AWARD_COLUMNS"),
            requirement_columns=_env_column_overrides("AIRTABLE_REQUIREMENT_COLUMNS"),
            timeout=_env_float("HTTP_TIMEOUT_SECONDS"),
        )


@dataclass(frozen=True)
class PublisherContext:
    """Who is submitting, and what. Interpolated into every award prompt."""

    publisher: str = "Infinite Books"
    title: str = "White Mirror Stories"
    description: str = "SF/F short story collection"

    @classmethod
    def from_env(cls) -> "PublisherContext":
        base = cls()
        return cls(
            publisher=_env_str("PUBLISHER_NAME", base.publisher),
            title=_env_str("PUBLICATION_TITLE", base.title),
            description=_env_str("PUBLICATION_DESCRIPTION", base.description),
        )


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def http_log_settings() -> Optional[Dict[str, object]]:
    """
    Request/response logging middleware settings, or None when disabled.

    - `AWARDS_HTTP_LOG=1` enables middleware
    - `AWARDS_HTTP_LOG_HEADERS=1` logs request/response headers (redacted)
    - `AWARDS_HTTP_LOG_BODY_MAX_BYTES=4096` caps body bytes captured per request/response
    """
    if not _env_bool("AWARDS_HTTP_LOG", default=False):
        return None
    return {
        "log_headers": _env_bool("AWARDS_HTTP_LOG_HEADERS", default=False),
        "max_body_bytes": _env_int("AWARDS_HTTP_LOG_BODY_MAX_BYTES", default=4096),
    }
