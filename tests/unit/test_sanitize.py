# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

from sastmerge.aggregate import combine_results, sanitize_report_payload
from sastmerge.aggregate.sanitize import sanitize_finding_payload
from sastmerge.enrichment.rules import GENERIC_REMEDIATION
from sastmerge.models import ScannerOutput


def test_sanitize_fills_every_required_field():
    payload = sanitize_finding_payload({"start": {"line": "7"}, "extra": {"remediation": ""}})
    assert payload == {
        "check_id": "unknown",
        "path": "Unknown",
        "start": {"line": 0},
        "end": {"line": 0},
        "extra": {
            "message": "Unknown vulnerability",
            "severity": "INFO",
            "description": "",
            "remediation": GENERIC_REMEDIATION,
        },
        "source": "Combined",
        "severity": "info",
    }


def test_sanitize_normalizes_severity_case_and_keeps_extra_keys():
    payload = sanitize_finding_payload(
        {
            "check_id": "rule",
            "path": "a.py",
            "start": {"line": 4, "col": 2},
            "severity": "Warning",
            "source": "CodeQL",
            "extra": {"message": "m", "remediation": "fix", "cwe_id": "CWE-22"},
        }
    )
    assert payload["extra"]["severity"] == "WARNING"
    assert payload["severity"] == "warning"
    assert payload["start"] == {"line": 4, "col": 2}
    assert payload["extra"]["cwe_id"] == "CWE-22"
    assert payload["extra"]["remediation"] == "fix"


def test_sanitize_report_payload_recounts_total():
    report = combine_results(
        "app.py",
        semgrep=ScannerOutput.from_payload({"vulnerabilities": [{"check_id": "a"}, {"check_id": "b"}]}),
    )
    payload = sanitize_report_payload(report)
    assert payload["total_vulnerabilities"] == 2
    assert all(v["extra"]["remediation"] for v in payload["vulnerabilities"])

    mapping = sanitize_report_payload({"file_name": "x", "vulnerabilities": [{}, "junk"]})
    assert mapping["total_vulnerabilities"] == 1
