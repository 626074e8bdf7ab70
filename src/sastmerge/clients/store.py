# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Result store client: persist combined reports and read stored ones back."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..aggregate.sanitize import sanitize_report_payload
from ..errors import PersistenceFailure, TransportFailure
from ..http.client import HttpClient
from ..http.models import HttpRequest, RetryConfig
from ..http.retry import send_with_retries
from ..models.report import CombinedReport, HistoryEntry, HistoryPage
from .scanner import error_detail, fetch_json

logger = logging.getLogger(__name__)


class ResultStoreClient:
    def __init__(self, http_client: HttpClient, *, base_url: str, retry_config: RetryConfig | None = None):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.retry_config = retry_config

    def store(self, report: CombinedReport) -> None:
        """Persist ``report``; raises ``PersistenceFailure`` when the store does not accept it."""
        request = HttpRequest(
            url=f"{self.base_url}/combined-results",
            method="POST",
            json=sanitize_report_payload(report),
        )
        response = send_with_retries(self.http_client, request, retry_config=self.retry_config)
        if response.status_code is None:
            raise PersistenceFailure(f"Error storing combined results: {response.error_message or 'no response'}")
        if not response.ok:
            raise PersistenceFailure(
                f"Failed to store combined results in database: {error_detail(response) or response.text[:500]}",
                status_code=response.status_code,
            )

    def save(self, report: CombinedReport) -> bool:
        """Persist ``report`` without propagating failures; the in-memory report stays valid."""
        try:
            self.store(report)
        except PersistenceFailure as exc:
            logger.error("%s", exc)
            return False
        logger.info("Stored combined results for %s", report.file_name)
        return True

    def _get(self, path: str, *, params: dict[str, Any] | None = None, failure: str) -> Any:
        request = HttpRequest(url=f"{self.base_url}{path}", params=params)
        return fetch_json(self.http_client, request, failure=failure, retry_config=self.retry_config)

    def get_report(self, scan_id: str) -> CombinedReport:
        payload = self._get(f"/scan/{scan_id}", failure="Failed to fetch scan details")
        if not isinstance(payload, Mapping):
            raise TransportFailure("Failed to fetch scan details")
        return CombinedReport.from_mapping(payload)

    def delete_scan(self, scan_id: str) -> None:
        """Remove a stored report; raises ``TransportFailure`` with the server's reason."""
        response = send_with_retries(
            self.http_client,
            HttpRequest(url=f"{self.base_url}/scan/{scan_id}", method="DELETE"),
            retry_config=self.retry_config,
        )
        if not response.ok:
            raise TransportFailure(
                error_detail(response) or "Failed to delete scan",
                status_code=response.status_code,
            )
        logger.info("Deleted stored scan %s", scan_id)

    def list_history(self, *, limit: int = 10, offset: int = 0) -> HistoryPage:
        """One page of stored scans, newest first as ordered by the server."""
        payload = self._get("/history", params={"limit": limit, "offset": offset}, failure="Failed to fetch scan history")
        if isinstance(payload, list):
            raw_items, total = payload, len(payload)
        elif isinstance(payload, Mapping):
            raw_items = payload.get("items") if isinstance(payload.get("items"), list) else []
            total = payload.get("total") if isinstance(payload.get("total"), int) else len(raw_items)
        else:
            raw_items, total = [], 0
        items = tuple(HistoryEntry.from_mapping(item) for item in raw_items if isinstance(item, Mapping))
        return HistoryPage(items=items, total=total)


__all__ = ["ResultStoreClient"]
