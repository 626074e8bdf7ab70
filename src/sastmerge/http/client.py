# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Transport seam shared by the scanner and result-store clients."""

from typing import Protocol

from ..config import HttpSettings, load_http_settings
from .models import HttpRequest, HttpResponse


class HttpClient(Protocol):
    """
    Anything that can turn an HttpRequest into an HttpResponse.

    Implementations report transport failures as ``HttpResponse(ok=False, status_code=None)``
    instead of raising, so retry and error mapping stay in one place.
    """

    def request(self, request: HttpRequest) -> HttpResponse: ...

    def close(self) -> None: ...


def create_default_http_client(settings: HttpSettings | None = None) -> HttpClient:
    """httpx-backed client configured from ``settings`` or the SASTMERGE_HTTP_* environment."""
    from .httpx_client import HttpxClient

    return HttpxClient(settings or load_http_settings())
