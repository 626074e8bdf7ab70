# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Merge raw scanner outputs into one deduplicated, enriched report."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone

from ..enrichment import generate_description, generate_remediation, map_to_cwe, map_to_owasp
from ..models.finding import EnrichedFinding, Finding, Severity
from ..models.pipeline import STAGE_ORDER, ScannerOutput, Stage
from ..models.report import (
    COMBINED_SCAN_TYPE,
    SCAN_SOURCES,
    CombinedReport,
    IndividualScores,
    ScanMetadata,
    SeverityCount,
)

logger = logging.getLogger(__name__)

# Keys of the metadata bag that enrichment owns; everything else is carried through.
_ENRICHED_KEYS = frozenset({"message", "severity", "description", "remediation", "owasp_category", "cwe_id"})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _scanner_taxonomy(finding: Finding, key: str) -> str | None:
    value = finding.metadata.get(key)
    return value if isinstance(value, str) and value.strip() else None


def enrich(finding: Finding) -> EnrichedFinding:
    """Normalize a source-tagged finding and attach description, taxonomy and remediation."""
    source = finding.source or "Unknown"
    severity = Severity.parse(finding.reported_severity)
    return EnrichedFinding(
        check_id=finding.check_id,
        path=finding.path,
        start=finding.start,
        end=finding.end,
        message=finding.message,
        source=source,
        severity=severity,
        description=generate_description(finding.check_id, finding.message, source),
        remediation=generate_remediation(finding.check_id, finding.message, source, severity),
        owasp_category=_scanner_taxonomy(finding, "owasp_category") or map_to_owasp(finding.check_id, finding.message),
        cwe_id=_scanner_taxonomy(finding, "cwe_id") or map_to_cwe(finding.check_id, finding.message),
        metadata={k: v for k, v in finding.metadata.items() if k not in _ENRICHED_KEYS},
    )


def merge_findings(sources: Iterable[tuple[str, Iterable[Finding]]]) -> list[EnrichedFinding]:
    """
    Deduplicate findings across scanners by composite key.

    Sources are consumed in the given order. A later finding replaces a stored one only when
    its severity is strictly higher; the replacement keeps the original position.
    """
    merged: dict[str, EnrichedFinding] = {}
    for source, findings in sources:
        for raw in findings:
            finding = raw.with_source(source)
            key = finding.key
            stored = merged.get(key)
            if stored is not None and not Severity.parse(finding.reported_severity).outranks(stored.severity):
                continue
            if stored is not None:
                logger.debug("Upgrading %s from %s (%s) to %s", key, stored.source, stored.severity.value, source)
            merged[key] = enrich(finding)
    return list(merged.values())


class Aggregator:
    """Builds the immutable CombinedReport for one pipeline run; performs no I/O."""

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or _utc_now

    def aggregate(self, file_name: str, outputs: Mapping[Stage, ScannerOutput]) -> CombinedReport:
        empty = ScannerOutput()
        ordered = [(stage, outputs.get(stage) or empty) for stage in STAGE_ORDER]

        findings = merge_findings((stage.value, output.findings) for stage, output in ordered)
        scores = IndividualScores(**{stage.score_key: output.score for stage, output in ordered})
        report = CombinedReport(
            file_name=file_name or "",
            findings=tuple(findings),
            severity_count=SeverityCount.of(findings),
            security_score=scores.average(),
            scan_timestamp=self._clock().isoformat(),
            scan_metadata=ScanMetadata(
                scan_type=COMBINED_SCAN_TYPE,
                scan_sources=SCAN_SOURCES,
                individual_scores=scores,
            ),
        )
        logger.info(
            "Combined %d unique findings from %d raw (score %.2f)",
            report.total_vulnerabilities,
            sum(len(output.findings) for _, output in ordered),
            report.security_score,
        )
        return report


def combine_results(
    file_name: str,
    semgrep: ScannerOutput | None = None,
    shiftleft: ScannerOutput | None = None,
    codeql: ScannerOutput | None = None,
) -> CombinedReport:
    """Convenience wrapper over ``Aggregator().aggregate`` with one argument per scanner."""
    outputs = {
        stage: output
        for stage, output in ((Stage.SEMGREP, semgrep), (Stage.SHIFTLEFT, shiftleft), (Stage.CODEQL, codeql))
        if output is not None
    }
    return Aggregator().aggregate(file_name, outputs)


__all__ = ["Aggregator", "combine_results", "enrich", "merge_findings"]
