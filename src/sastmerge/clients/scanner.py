# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Request/response wrapper around the three scanner endpoints."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from ..errors import ErrorCategory, TransportFailure, error_category_to_reason
from ..http.client import HttpClient
from ..http.models import HttpRequest, HttpResponse, RetryConfig
from ..http.retry import build_default_retry_config, send_with_retries
from ..models.pipeline import Artifact, RuleSelection, ScannerOutput, Stage
from ..models.rule import RulePage, SemgrepRule

logger = logging.getLogger(__name__)


def error_detail(response: HttpResponse) -> str | None:
    """Server-provided ``{"detail": "..."}`` message of an error response, if any."""
    try:
        payload = response.json()
    except ValueError:
        return None
    if isinstance(payload, Mapping):
        detail = payload.get("detail")
        if isinstance(detail, str) and detail.strip():
            return detail
    return None


def fetch_json(
    http_client: HttpClient,
    request: HttpRequest,
    *,
    failure: str,
    retry_config: RetryConfig | None = None,
) -> Any:
    """Send a read-only request and decode its JSON body; raises ``TransportFailure``."""
    response = send_with_retries(http_client, request, retry_config=retry_config)
    if not response.ok:
        raise TransportFailure(error_detail(response) or failure, status_code=response.status_code)
    try:
        return response.json()
    except ValueError as exc:
        raise TransportFailure(failure, status_code=response.status_code) from exc


class ScannerClient:
    """
    Uploads an artifact to one scanner endpoint and parses its answer.

    The two halves are separate so a caller can report the upload and processing phases
    independently: ``submit`` never raises, ``parse`` raises ``TransportFailure``.
    """

    def __init__(self, http_client: HttpClient, *, base_url: str, retry_config: RetryConfig | None = None):
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.retry_config = retry_config

    def url_for(self, stage: Stage) -> str:
        return f"{self.base_url}{stage.endpoint}"

    def build_request(self, stage: Stage, artifact: Artifact, rule: RuleSelection | None = None) -> HttpRequest:
        data: dict[str, str] | None = None
        rule_value = rule.form_value if rule is not None else None
        if rule_value:
            if stage.accepts_rule:
                data = {"custom_rule": rule_value}
            else:
                logger.debug("Ignoring rule selection for %s; only Semgrep accepts one", stage.value)
        return HttpRequest(
            url=self.url_for(stage),
            method="POST",
            files={"file": (artifact.file_name, artifact.content)},
            data=data,
        )

    def submit(self, stage: Stage, artifact: Artifact, rule: RuleSelection | None = None) -> HttpResponse:
        request = self.build_request(stage, artifact, rule)
        logger.info("Uploading %s (%d bytes) to %s", artifact.file_name, len(artifact.content), stage.value)
        return send_with_retries(self.http_client, request, retry_config=self.upload_retry_config)

    @property
    def upload_retry_config(self) -> RetryConfig:
        """Retry policy for scan uploads: connection failures are retried, timeouts are not."""
        return replace(self.retry_config or build_default_retry_config(), retry_timeouts=False)

    def parse(self, stage: Stage, response: HttpResponse) -> ScannerOutput:
        if response.status_code is None:
            category = response.meta.get("error_category") or ErrorCategory.UNKNOWN_ERROR
            reason = error_category_to_reason(category)
            logger.warning("%s request failed: %s (%s)", stage.value, response.error_message, response.error_type)
            raise TransportFailure(
                f"{stage.failure_message}: {reason}" if reason else stage.failure_message,
                stage=stage.value,
                category=ErrorCategory(category),
            )

        if not response.ok:
            detail = error_detail(response)
            logger.warning("%s returned HTTP %s: %s", stage.value, response.status_code, detail or response.text[:200])
            raise TransportFailure(
                detail or stage.failure_message,
                stage=stage.value,
                status_code=response.status_code,
                category=ErrorCategory.HTTP_ERROR,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise TransportFailure(
                f"{stage.failure_message}: malformed response",
                stage=stage.value,
                status_code=response.status_code,
            ) from exc
        if not isinstance(payload, Mapping):
            raise TransportFailure(
                f"{stage.failure_message}: malformed response",
                stage=stage.value,
                status_code=response.status_code,
            )

        output = ScannerOutput.from_payload(payload)
        logger.info("%s reported %d findings (score %s)", stage.value, len(output.findings), output.score)
        return output

    def scan(self, stage: Stage, artifact: Artifact, rule: RuleSelection | None = None) -> ScannerOutput:
        return self.parse(stage, self.submit(stage, artifact, rule))

    def list_rules(
        self,
        *,
        query: str | None = None,
        limit: int = 50,
        offset: int = 0,
        rule_type: str | None = None,
        severity: str | None = None,
    ) -> RulePage:
        """One page of the Semgrep registry catalog; filters left as ``None`` are not sent."""
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        for name, value in (("query", query), ("rule_type", rule_type), ("severity", severity)):
            if value:
                params[name] = value
        payload = fetch_json(
            self.http_client,
            HttpRequest(url=f"{self.base_url}/semgrep-rules", params=params),
            failure="Failed to fetch Semgrep rules",
            retry_config=self.retry_config,
        )
        raw = payload.get("rules") if isinstance(payload, Mapping) else None
        # Entries without an id cannot be selected, so they are not listed.
        rules = tuple(
            SemgrepRule.from_mapping(item)
            for item in (raw if isinstance(raw, list) else [])
            if isinstance(item, Mapping) and item.get("id")
        )
        total = payload.get("total") if isinstance(payload, Mapping) else None
        return RulePage(
            rules=rules,
            total=total if isinstance(total, int) else len(rules),
            has_more=bool(payload.get("has_more")) if isinstance(payload, Mapping) else False,
        )

    def get_rule(self, rule_id: str) -> SemgrepRule:
        payload = fetch_json(
            self.http_client,
            HttpRequest(url=f"{self.base_url}/semgrep-rule/{rule_id}"),
            failure=f"Failed to fetch Semgrep rule {rule_id}",
            retry_config=self.retry_config,
        )
        if not isinstance(payload, Mapping):
            raise TransportFailure(f"Failed to fetch Semgrep rule {rule_id}")
        return SemgrepRule.from_mapping(payload, rule_id=rule_id)


__all__ = ["ScannerClient", "error_detail", "fetch_json"]
