# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Configuration helpers for SASTMerge."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

from .version import __version__

DEFAULT_USER_AGENT = f"SASTMerge/{__version__} (combined SAST pipeline)"
DEFAULT_API_BASE_URL = "http://localhost:8000/api/v1/scan"

N = TypeVar("N", int, float)
_TRUTHY = frozenset({"1", "true", "yes", "on"})


def _number_env(name: str, default: N, cast: Callable[[str], N]) -> N:
    """Numeric env var; unset or unparsable values fall back to ``default``."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        return default


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class HttpSettings:
    """HTTP client defaults."""

    # Scanners run whole-project analyses server-side, so the default is generous.
    timeout: float = 300.0
    max_retries: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    verify_ssl: bool = True
    max_body_bytes: int = 64 * 1024 * 1024

    @classmethod
    def from_env(cls) -> "HttpSettings":
        """Create settings from environment variables (evaluated at call time)."""
        max_body_bytes = _number_env("SASTMERGE_HTTP_MAX_BODY_BYTES", cls.max_body_bytes, int)
        if max_body_bytes <= 0:
            max_body_bytes = cls.max_body_bytes
        return cls(
            timeout=_number_env("SASTMERGE_HTTP_TIMEOUT", cls.timeout, float),
            max_retries=_number_env("SASTMERGE_HTTP_RETRIES", cls.max_retries, int),
            backoff_factor=_number_env("SASTMERGE_HTTP_BACKOFF", cls.backoff_factor, float),
            initial_delay=_number_env("SASTMERGE_HTTP_INITIAL_DELAY", cls.initial_delay, float),
            user_agent=os.getenv("SASTMERGE_USER_AGENT", cls.user_agent),
            verify_ssl=_bool_env("SASTMERGE_HTTP_VERIFY_SSL", cls.verify_ssl),
            max_body_bytes=max_body_bytes,
        )


@dataclass
class PipelineSettings:
    """Pipeline defaults: where the scanners live and how runs are paced."""

    api_base_url: str = DEFAULT_API_BASE_URL
    settle_interval: float = 0.5
    persist_results: bool = True

    @classmethod
    def from_env(cls) -> "PipelineSettings":
        settle_interval = _number_env("SASTMERGE_SETTLE_INTERVAL", cls.settle_interval, float)
        if settle_interval < 0:
            settle_interval = 0.0
        base_url = (os.getenv("SASTMERGE_API_BASE_URL") or cls.api_base_url).rstrip("/")
        return cls(
            api_base_url=base_url,
            settle_interval=settle_interval,
            persist_results=_bool_env("SASTMERGE_PERSIST_RESULTS", cls.persist_results),
        )


def load_http_settings() -> HttpSettings:
    """Load HTTP settings from environment with sensible defaults."""
    return HttpSettings.from_env()


def load_pipeline_settings() -> PipelineSettings:
    return PipelineSettings.from_env()
