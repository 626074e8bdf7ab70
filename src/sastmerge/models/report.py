# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Dataclasses for the combined scan report."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from .finding import EnrichedFinding, Severity

COMBINED_SCAN_TYPE = "Combined SAST"
SCAN_SOURCES: tuple[str, ...] = ("Semgrep", "ShiftLeft", "CodeQL")


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class SeverityCount:
    ERROR: int = 0
    WARNING: int = 0
    INFO: int = 0

    @classmethod
    def of(cls, findings: Iterable[EnrichedFinding]) -> SeverityCount:
        counts = {severity: 0 for severity in Severity}
        for finding in findings:
            counts[finding.severity] += 1
        return cls(ERROR=counts[Severity.ERROR], WARNING=counts[Severity.WARNING], INFO=counts[Severity.INFO])

    def to_dict(self) -> dict[str, int]:
        return {"ERROR": self.ERROR, "WARNING": self.WARNING, "INFO": self.INFO}


@dataclass(frozen=True)
class IndividualScores:
    """Raw per-scanner scores; zero means the scanner reported nothing."""

    semgrep: float = 0.0
    shiftleft: float = 0.0
    codeql: float = 0.0

    def average(self) -> float:
        """Mean over scanners that reported a positive score; 0 when none did."""
        contributing = [score for score in (self.semgrep, self.shiftleft, self.codeql) if score > 0]
        if not contributing:
            return 0
        return sum(contributing) / len(contributing)

    def to_dict(self) -> dict[str, float]:
        return {"semgrep": self.semgrep, "shiftleft": self.shiftleft, "codeql": self.codeql}


@dataclass(frozen=True)
class ScanMetadata:
    scan_type: str = COMBINED_SCAN_TYPE
    scan_sources: tuple[str, ...] = SCAN_SOURCES
    individual_scores: IndividualScores = field(default_factory=IndividualScores)

    def to_dict(self) -> dict[str, Any]:
        return {
            "scan_type": self.scan_type,
            "scan_sources": list(self.scan_sources),
            "individual_scores": self.individual_scores.to_dict(),
        }

    @classmethod
    def from_mapping(cls, data: Any) -> ScanMetadata:
        # scan_type is a routing discriminator owned by whichever pipeline stored the report.
        if not isinstance(data, Mapping):
            return cls(scan_type="", scan_sources=())
        scores = data.get("individual_scores")
        scores = scores if isinstance(scores, Mapping) else {}
        sources = data.get("scan_sources")
        return cls(
            scan_type=str(data.get("scan_type") or ""),
            scan_sources=tuple(str(s) for s in sources) if isinstance(sources, (list, tuple)) else (),
            individual_scores=IndividualScores(
                semgrep=_number(scores.get("semgrep")),
                shiftleft=_number(scores.get("shiftleft")),
                codeql=_number(scores.get("codeql")),
            ),
        )


@dataclass(frozen=True)
class CombinedReport:
    """Merged, immutable result of one pipeline run."""

    file_name: str
    findings: tuple[EnrichedFinding, ...]
    severity_count: SeverityCount
    security_score: float
    scan_timestamp: str
    scan_metadata: ScanMetadata = field(default_factory=ScanMetadata)

    def __post_init__(self) -> None:
        object.__setattr__(self, "findings", tuple(self.findings))

    @property
    def total_vulnerabilities(self) -> int:
        return len(self.findings)

    @property
    def scan_type(self) -> str:
        return self.scan_metadata.scan_type

    def to_dict(self) -> dict[str, Any]:
        return {
            "file_name": self.file_name,
            "security_score": self.security_score,
            "vulnerabilities": [finding.to_dict() for finding in self.findings],
            "severity_count": self.severity_count.to_dict(),
            "total_vulnerabilities": self.total_vulnerabilities,
            "scan_timestamp": self.scan_timestamp,
            "scan_metadata": self.scan_metadata.to_dict(),
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> CombinedReport:
        """Rebuild a stored report for display; ``scan_type`` is passed through unchanged."""
        raw_findings = data.get("vulnerabilities")
        findings = tuple(
            EnrichedFinding.from_mapping(item) for item in (raw_findings if isinstance(raw_findings, list) else []) if isinstance(item, Mapping)
        )
        raw_counts = data.get("severity_count")
        if isinstance(raw_counts, Mapping):
            counts = SeverityCount(
                ERROR=int(_number(raw_counts.get("ERROR"))),
                WARNING=int(_number(raw_counts.get("WARNING"))),
                INFO=int(_number(raw_counts.get("INFO"))),
            )
        else:
            counts = SeverityCount.of(findings)
        return cls(
            file_name=str(data.get("file_name") or ""),
            findings=findings,
            severity_count=counts,
            security_score=_number(data.get("security_score")),
            scan_timestamp=str(data.get("scan_timestamp") or ""),
            scan_metadata=ScanMetadata.from_mapping(data.get("scan_metadata")),
        )


@dataclass(frozen=True)
class HistoryEntry:
    """Summary row of a stored report as returned by the history endpoint."""

    id: str
    file_name: str
    scan_timestamp: str
    security_score: float
    total_vulnerabilities: int
    severity_count: SeverityCount
    scan_type: str

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> HistoryEntry:
        raw_counts = data.get("severity_count")
        raw_counts = raw_counts if isinstance(raw_counts, Mapping) else {}
        metadata = data.get("scan_metadata")
        scan_type = metadata.get("scan_type") if isinstance(metadata, Mapping) else None
        return cls(
            id=str(data.get("id") or data.get("_id") or ""),
            file_name=str(data.get("file_name") or ""),
            scan_timestamp=str(data.get("scan_timestamp") or ""),
            security_score=_number(data.get("security_score")),
            total_vulnerabilities=int(_number(data.get("total_vulnerabilities"))),
            severity_count=SeverityCount(
                ERROR=int(_number(raw_counts.get("ERROR"))),
                WARNING=int(_number(raw_counts.get("WARNING"))),
                INFO=int(_number(raw_counts.get("INFO"))),
            ),
            scan_type=str(scan_type or ""),
        )


@dataclass(frozen=True)
class HistoryPage:
    items: tuple[HistoryEntry, ...] = ()
    total: int = 0


__all__ = [
    "COMBINED_SCAN_TYPE",
    "CombinedReport",
    "HistoryEntry",
    "HistoryPage",
    "IndividualScores",
    "SCAN_SOURCES",
    "ScanMetadata",
    "SeverityCount",
]
