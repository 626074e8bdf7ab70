# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

import dataclasses

import pytest

from sastmerge.aggregate import combine_results
from sastmerge.models import (
    CombinedReport,
    EnrichedFinding,
    Finding,
    HistoryEntry,
    IndividualScores,
    PipelineState,
    Position,
    ScannerOutput,
    Severity,
    Stage,
    composite_key,
)


def test_finding_from_mapping_applies_defaults():
    finding = Finding.from_mapping({})
    assert finding.check_id == "unknown"
    assert finding.path == "Unknown"
    assert finding.start == Position(line=0)
    assert finding.end == Position(line=0)
    assert finding.message == "Unknown vulnerability"
    assert finding.reported_severity is None


def test_finding_prefers_nested_message_and_severity():
    finding = Finding.from_mapping(
        {
            "check_id": "rule",
            "path": "app.py",
            "start": {"line": "12", "col": 4},
            "message": "top-level",
            "severity": "info",
            "extra": {"message": "nested", "severity": "error", "metadata": {"confidence": "HIGH"}},
        }
    )
    assert finding.message == "nested"
    assert finding.reported_severity == "error"
    assert finding.start == Position(line=12, col=4)
    assert finding.metadata["metadata"] == {"confidence": "HIGH"}


def test_finding_falls_back_to_top_level_severity():
    finding = Finding.from_mapping({"severity": "warning", "start": {"line": "not-a-number"}})
    assert finding.reported_severity == "warning"
    assert finding.start.line == 0


def test_composite_key_independent_of_source():
    finding = Finding.from_mapping({"check_id": "rule", "path": "a.py", "start": {"line": 3}})
    assert finding.key == "rule:a.py:3"
    assert finding.with_source("CodeQL").key == finding.key
    assert composite_key("rule", "a.py", 3) == finding.key


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("error", Severity.ERROR),
        ("Warning", Severity.WARNING),
        ("INFO", Severity.INFO),
        ("critical", Severity.ERROR),
        ("medium", Severity.WARNING),
        ("note", Severity.INFO),
        (None, Severity.INFO),
        ("bogus", Severity.INFO),
    ],
)
def test_severity_parse(raw, expected):
    assert Severity.parse(raw) is expected


def test_severity_ordering():
    assert Severity.ERROR.outranks(Severity.WARNING)
    assert Severity.WARNING.outranks(Severity.INFO)
    assert not Severity.WARNING.outranks(Severity.WARNING)
    assert not Severity.INFO.outranks(Severity.ERROR)


def test_scanner_output_from_payload():
    output = ScannerOutput.from_payload({"vulnerabilities": [{"check_id": "a"}, "junk"], "security_score": "8.5"})
    assert len(output.findings) == 1
    assert output.score == 8.5
    assert ScannerOutput.from_payload({"vulnerabilities": None}).score == 0.0


def test_individual_scores_average_excludes_zero():
    assert IndividualScores(semgrep=0, shiftleft=8, codeql=6).average() == 7
    assert IndividualScores().average() == 0


def test_enriched_finding_is_frozen_and_serializes_extra():
    finding = EnrichedFinding(
        check_id="rule",
        path="a.py",
        start=Position(1),
        end=Position(2, 5),
        message="msg",
        source="Semgrep",
        severity=Severity.WARNING,
        description="desc",
        remediation="fix",
        cwe_id="CWE-79",
        metadata={"metadata": {"references": ["x"]}},
    )
    with pytest.raises(dataclasses.FrozenInstanceError):
        finding.severity = Severity.ERROR  # type: ignore[misc]
    with pytest.raises(TypeError):
        finding.metadata["other"] = 1  # type: ignore[index]

    payload = finding.to_dict()
    assert payload["severity"] == "warning"
    assert payload["end"] == {"line": 2, "col": 5}
    assert payload["extra"]["severity"] == "WARNING"
    assert payload["extra"]["cwe_id"] == "CWE-79"
    assert "owasp_category" not in payload["extra"]
    assert payload["extra"]["metadata"] == {"references": ["x"]}


def test_stored_report_passes_scan_type_through():
    stored = {
        "file_name": "app.zip",
        "security_score": 6.5,
        "vulnerabilities": [
            {
                "check_id": "ai-finding",
                "path": "app.py",
                "start": {"line": 4},
                "source": "Gemini",
                "extra": {"message": "m", "severity": "ERROR", "remediation": "r", "description": "d"},
            }
        ],
        "severity_count": {"ERROR": 1, "WARNING": 0, "INFO": 0},
        "scan_timestamp": "2025-01-01T00:00:00+00:00",
        "scan_metadata": {"scan_type": "SAST & AI"},
    }
    report = CombinedReport.from_mapping(stored)
    assert report.scan_type == "SAST & AI"
    assert report.findings[0].source == "Gemini"
    assert report.findings[0].remediation == "r"
    assert report.to_dict()["scan_metadata"]["scan_type"] == "SAST & AI"


def test_history_entry_from_mapping():
    entry = HistoryEntry.from_mapping(
        {
            "id": "abc",
            "file_name": "x.py",
            "security_score": 7,
            "total_vulnerabilities": 3,
            "severity_count": {"ERROR": 1, "WARNING": 2},
            "scan_metadata": {"scan_type": "AI"},
        }
    )
    assert entry.id == "abc"
    assert entry.scan_type == "AI"
    assert entry.severity_count.WARNING == 2
    assert entry.severity_count.INFO == 0


def test_findings_reports_and_states_are_hashable():
    finding = Finding.from_mapping(
        {"check_id": "rule", "path": "a.py", "start": {"line": 1}, "extra": {"severity": "ERROR", "metadata": {"cwe": ["x"]}}}
    )
    output = ScannerOutput(findings=(finding,), score=4)
    report = combine_results("a.py", semgrep=output)
    state = PipelineState(outputs=((Stage.SEMGREP, output),), report=report)

    assert {finding, finding.with_source("Semgrep")} == {finding, finding.with_source("Semgrep")}
    assert hash(report) == hash(report)
    assert hash(report.findings[0]) == hash(dataclasses.replace(report.findings[0], metadata={}))
    assert state in {state}
