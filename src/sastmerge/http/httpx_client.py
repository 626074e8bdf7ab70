# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""httpx-backed HttpClient implementation."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from ..config import HttpSettings, load_http_settings
from ..errors import categorize_exception
from .client import HttpClient
from .models import HttpRequest, HttpResponse

logger = logging.getLogger(__name__)

FALLBACK_BODY_LIMIT = 64 * 1024 * 1024


def _read_capped(resp: httpx.Response, limit: int) -> tuple[bytes, bool]:
    """Read at most ``limit`` bytes of a streamed body; the flag reports truncation."""
    buffer = bytearray()
    for chunk in resp.iter_bytes():
        room = limit - len(buffer)
        if len(chunk) > room:
            buffer.extend(chunk[:room])
            return bytes(buffer), True
        buffer.extend(chunk)
    return bytes(buffer), False


def _decode(content: bytes, encoding: str | None) -> str:
    try:
        return content.decode(encoding or "utf-8", errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


def _body_kwargs(request: HttpRequest) -> dict[str, Any]:
    # Multipart uploads carry both ``files`` and form ``data``; JSON posts carry ``json``.
    kwargs: dict[str, Any] = {}
    if request.params:
        kwargs["params"] = request.params
    if request.json is not None:
        kwargs["json"] = request.json
    if request.data:
        kwargs["data"] = request.data
    if request.files:
        kwargs["files"] = request.files
    return kwargs


class HttpxClient(HttpClient):
    """Synchronous httpx client wrapper; never raises from ``request``."""

    def __init__(self, settings: HttpSettings | None = None, client: httpx.Client | None = None):
        self.settings = settings or load_http_settings()
        self._client = client or httpx.Client(timeout=self.settings.timeout, verify=self.settings.verify_ssl)

    @property
    def body_limit(self) -> int:
        return self.settings.max_body_bytes if self.settings.max_body_bytes > 0 else FALLBACK_BODY_LIMIT

    def request(self, request: HttpRequest) -> HttpResponse:
        headers = {"User-Agent": self.settings.user_agent, **(request.headers or {})}
        timeout = self.settings.timeout if request.timeout is None else request.timeout
        limit = self.body_limit

        try:
            with self._client.stream(
                request.method,
                request.url,
                headers=headers,
                timeout=timeout,
                **_body_kwargs(request),
            ) as resp:
                content, truncated = _read_capped(resp, limit)
                text = _decode(content, resp.encoding)
        except Exception as exc:  # noqa: BLE001
            category = categorize_exception(exc)
            logger.debug("%s %s failed (%s): %s", request.method, request.url, category.value, exc)
            return HttpResponse(
                ok=False,
                error_message=str(exc) or type(exc).__name__,
                error_type=type(exc).__name__,
                meta={"error_category": category},
            )

        if truncated:
            logger.warning("Response body from %s truncated at %d bytes", request.url, limit)
        return HttpResponse(
            ok=resp.is_success,
            status_code=resp.status_code,
            headers=dict(resp.headers),
            text=text,
            content=content,
            url=str(resp.url),
            meta={"body_truncated": truncated, "body_bytes_read": len(content)},
        )

    def close(self) -> None:
        self._client.close()
