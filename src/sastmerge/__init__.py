# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
SASTMerge package entrypoint.

This package runs three static-analysis scanners (Semgrep, ShiftLeft, CodeQL)
against one uploaded artifact in a fixed sequence and merges their findings
into a single deduplicated, enriched report. HTTP behavior is abstracted
behind an injectable client interface, and domain objects are modeled with
typed dataclasses.
"""

from .aggregate import Aggregator, combine_results, sanitize_report_payload
from .clients import ResultStoreClient, ScannerClient
from .config import HttpSettings, PipelineSettings, load_http_settings, load_pipeline_settings
from .errors import (
    AggregationFailure,
    PersistenceFailure,
    SastMergeError,
    TransportFailure,
    ValidationFailure,
)
from .http import (
    HttpClient,
    HttpRequest,
    HttpResponse,
    HttpxClient,
    RetryConfig,
    StubHttpClient,
    create_default_http_client,
)
from .log import setup_logging
from .models import (
    Artifact,
    CombinedReport,
    EnrichedFinding,
    Finding,
    Phase,
    PipelineState,
    RulePage,
    RuleSelection,
    ScannerOutput,
    SemgrepRule,
    Severity,
    Stage,
)
from .pipeline import PipelineController
from .runtime import SastMerge
from .version import __version__

__all__ = [
    "AggregationFailure",
    "Aggregator",
    "Artifact",
    "CombinedReport",
    "EnrichedFinding",
    "Finding",
    "HttpClient",
    "HttpRequest",
    "HttpResponse",
    "HttpSettings",
    "HttpxClient",
    "PersistenceFailure",
    "Phase",
    "PipelineController",
    "PipelineSettings",
    "PipelineState",
    "ResultStoreClient",
    "RetryConfig",
    "RulePage",
    "RuleSelection",
    "SastMerge",
    "SastMergeError",
    "ScannerClient",
    "ScannerOutput",
    "SemgrepRule",
    "Severity",
    "Stage",
    "StubHttpClient",
    "TransportFailure",
    "ValidationFailure",
    "combine_results",
    "create_default_http_client",
    "load_http_settings",
    "load_pipeline_settings",
    "sanitize_report_payload",
    "setup_logging",
    "__version__",
]
