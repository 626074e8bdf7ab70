# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""In-process HttpClient implementations."""

from __future__ import annotations

from collections.abc import Callable

from .client import HttpClient
from .models import HttpRequest, HttpResponse

Responder = Callable[[HttpRequest], HttpResponse]


class StubHttpClient(HttpClient):
    """Deterministic, programmable HttpClient for tests and offline runs.

    Responses are keyed by ``(method, url)``; a value may be a fixed
    ``HttpResponse`` or a callable receiving the request.
    """

    def __init__(self, responses: dict[tuple[str, str], HttpResponse | Responder] | None = None):
        self._responses = dict(responses or {})
        self.requests: list[HttpRequest] = []
        self.closed = False

    def add(self, method: str, url: str, response: HttpResponse | Responder) -> None:
        self._responses[(method.upper(), url)] = response

    def calls_to(self, url: str) -> list[HttpRequest]:
        return [r for r in self.requests if r.url == url]

    def request(self, request: HttpRequest) -> HttpResponse:
        self.requests.append(request)
        configured = self._responses.get((request.method.upper(), request.url))
        if configured is None:
            return HttpResponse(ok=False, status_code=None, error_message="No stubbed response configured")
        if callable(configured):
            return configured(request)
        return configured

    def close(self) -> None:
        self.closed = True
