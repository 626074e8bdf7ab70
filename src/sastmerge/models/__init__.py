# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclass exports for SASTMerge."""

from ..http.models import Headers, HttpRequest, HttpResponse, RetryConfig
from .finding import EnrichedFinding, Finding, Position, Severity, composite_key
from .pipeline import (
    STAGE_ORDER,
    Artifact,
    Phase,
    PipelineState,
    RuleSelection,
    ScannerOutput,
    Stage,
    next_stage,
)
from .report import (
    COMBINED_SCAN_TYPE,
    SCAN_SOURCES,
    CombinedReport,
    HistoryEntry,
    HistoryPage,
    IndividualScores,
    ScanMetadata,
    SeverityCount,
)
from .rule import RulePage, SemgrepRule

__all__ = [
    "Artifact",
    "COMBINED_SCAN_TYPE",
    "CombinedReport",
    "EnrichedFinding",
    "Finding",
    "Headers",
    "HistoryEntry",
    "HistoryPage",
    "HttpRequest",
    "HttpResponse",
    "IndividualScores",
    "Phase",
    "PipelineState",
    "Position",
    "RetryConfig",
    "RulePage",
    "RuleSelection",
    "SCAN_SOURCES",
    "STAGE_ORDER",
    "ScanMetadata",
    "ScannerOutput",
    "SemgrepRule",
    "Severity",
    "SeverityCount",
    "Stage",
    "composite_key",
    "next_stage",
]
