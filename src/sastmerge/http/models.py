# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""HTTP request/response data models used across SASTMerge."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from ..config import HttpSettings

Headers = dict[str, str]
# Multipart file parts as accepted by httpx: field name -> (file name, content).
Files = dict[str, tuple[str, bytes]]


@dataclass
class HttpRequest:
    """Normalized request representation consumed by HttpClient implementations."""

    url: str
    method: str = "GET"
    headers: Headers | None = None
    params: dict[str, Any] | None = None
    json: Any = None
    data: dict[str, str] | None = None
    files: Files | None = None
    timeout: float | None = None


@dataclass
class HttpResponse:
    """Normalized HTTP response; transport errors are reported with ``status_code=None``."""

    ok: bool
    status_code: int | None = None
    headers: Headers = field(default_factory=dict)
    text: str = ""
    content: bytes = b""
    url: str | None = None
    error_message: str | None = None
    error_type: str | None = None
    meta: dict[str, Any] = field(default_factory=dict)

    def json(self) -> Any:
        """Decode the body as JSON; raises ``ValueError`` on malformed or empty bodies."""
        return json.loads(self.text or self.content.decode("utf-8", errors="replace"))

    @classmethod
    def from_json(cls, payload: Any, *, status_code: int = 200, url: str | None = None) -> HttpResponse:
        """Build a response carrying a JSON body (used by stubbed transports)."""
        text = json.dumps(payload)
        return cls(
            ok=200 <= status_code < 300,
            status_code=status_code,
            headers={"content-type": "application/json"},
            text=text,
            content=text.encode("utf-8"),
            url=url,
        )


@dataclass
class RetryConfig:
    """Retry policy for HTTP requests derived from HttpSettings."""

    max_attempts: int = 2
    backoff_factor: float = 2.0
    initial_delay: float = 1.0
    # A timed-out scan may still be running server-side; resending it doubles the work.
    retry_timeouts: bool = True

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> RetryConfig:
        """Build a retry config from the shared HttpSettings."""
        return cls(
            max_attempts=max(1, settings.max_retries),
            backoff_factor=settings.backoff_factor,
            initial_delay=settings.initial_delay,
        )
