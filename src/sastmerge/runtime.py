# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""High-level SASTMerge facade for combined scan workflows."""

from __future__ import annotations

from contextlib import suppress
from pathlib import Path

from .aggregate import Aggregator
from .clients import ResultStoreClient, ScannerClient
from .config import HttpSettings, PipelineSettings, load_http_settings, load_pipeline_settings
from .http.client import HttpClient, create_default_http_client
from .http.models import RetryConfig
from .models import Artifact, CombinedReport, HistoryPage, PipelineState, RulePage, RuleSelection, SemgrepRule
from .pipeline import PipelineController, StateListener


class SastMerge:
    """
    Convenience wrapper that wires a shared HTTP client across the scanner and store clients.

    One instance owns one controller, so a new ``scan`` supersedes the previous result.
    """

    def __init__(
        self,
        http_client: HttpClient | None = None,
        *,
        http_settings: HttpSettings | None = None,
        pipeline_settings: PipelineSettings | None = None,
    ):
        self.http_settings = http_settings or load_http_settings()
        self.pipeline_settings = pipeline_settings or load_pipeline_settings()
        self.http_client = http_client or create_default_http_client(self.http_settings)
        retry_config = RetryConfig.from_settings(self.http_settings)
        base_url = self.pipeline_settings.api_base_url
        self.scanner = ScannerClient(self.http_client, base_url=base_url, retry_config=retry_config)
        self.store = ResultStoreClient(self.http_client, base_url=base_url, retry_config=retry_config)
        self.controller = PipelineController(
            self.scanner,
            aggregator=Aggregator(),
            store=self.store,
            settings=self.pipeline_settings,
        )

    @property
    def state(self) -> PipelineState:
        return self.controller.state

    def on_progress(self, listener: StateListener) -> None:
        self.controller.subscribe(listener)

    def scan(self, artifact: Artifact, *, rule: RuleSelection | None = None) -> PipelineState:
        return self.controller.run(artifact, rule)

    def scan_file(
        self,
        path: str | Path,
        *,
        custom_rule: str | None = None,
        rule_id: str | None = None,
    ) -> PipelineState:
        rule = RuleSelection(custom_rule=custom_rule, rule_id=rule_id) if (custom_rule is not None or rule_id) else None
        return self.scan(Artifact.from_path(path), rule=rule)

    def get_report(self, scan_id: str) -> CombinedReport:
        return self.store.get_report(scan_id)

    def history(self, *, limit: int = 10, offset: int = 0) -> HistoryPage:
        return self.store.list_history(limit=limit, offset=offset)

    def delete_scan(self, scan_id: str) -> None:
        self.store.delete_scan(scan_id)

    def rules(
        self,
        *,
        query: str | None = None,
        limit: int = 50,
        offset: int = 0,
        rule_type: str | None = None,
        severity: str | None = None,
    ) -> RulePage:
        """Browse the Semgrep registry for ids usable with ``scan_file(rule_id=...)``."""
        return self.scanner.list_rules(query=query, limit=limit, offset=offset, rule_type=rule_type, severity=severity)

    def rule(self, rule_id: str) -> SemgrepRule:
        return self.scanner.get_rule(rule_id)

    def close(self) -> None:
        with suppress(Exception):
            if hasattr(self.http_client, "close"):
                self.http_client.close()

    def __enter__(self) -> SastMerge:
        return self

    def __exit__(self, _exc_type, _exc, _tb) -> None:  # noqa: ANN001
        self.close()
