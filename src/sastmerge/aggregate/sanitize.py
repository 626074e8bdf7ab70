# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Store-bound payload validation.

This pass re-checks the wire form of a report independently of the model
defaults, so a finding that reached the payload through any other path still
carries every field the result store requires.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ..enrichment.rules import GENERIC_REMEDIATION
from ..models.finding import DEFAULT_CHECK_ID, DEFAULT_MESSAGE, DEFAULT_PATH
from ..models.report import CombinedReport

DEFAULT_SOURCE = "Combined"


def _position(value: Any) -> dict[str, Any]:
    if isinstance(value, Mapping) and isinstance(value.get("line"), int) and not isinstance(value.get("line"), bool):
        return dict(value)
    return {"line": 0}


def sanitize_finding_payload(vuln: Mapping[str, Any]) -> dict[str, Any]:
    raw_extra = vuln.get("extra")
    extra_in: dict[str, Any] = dict(raw_extra) if isinstance(raw_extra, Mapping) else {}

    extra = {
        "message": extra_in.get("message") or vuln.get("message") or DEFAULT_MESSAGE,
        "severity": str(extra_in.get("severity") or vuln.get("severity") or "INFO").upper(),
        "description": extra_in.get("description") or "",
        "remediation": extra_in.get("remediation") or "",
    }
    for key, value in extra_in.items():
        if key not in extra:
            extra[key] = value
    if not extra["remediation"]:
        extra["remediation"] = GENERIC_REMEDIATION

    return {
        "check_id": vuln.get("check_id") or DEFAULT_CHECK_ID,
        "path": vuln.get("path") or DEFAULT_PATH,
        "start": _position(vuln.get("start")),
        "end": _position(vuln.get("end")),
        "extra": extra,
        "source": vuln.get("source") or DEFAULT_SOURCE,
        "severity": str(vuln.get("severity") or "info").lower(),
    }


def sanitize_report_payload(report: CombinedReport | Mapping[str, Any]) -> dict[str, Any]:
    """Wire dict of ``report`` with every finding re-validated for the result store."""
    payload = report.to_dict() if isinstance(report, CombinedReport) else dict(report)
    raw = payload.get("vulnerabilities")
    findings = [sanitize_finding_payload(v) for v in (raw if isinstance(raw, list) else []) if isinstance(v, Mapping)]
    payload["vulnerabilities"] = findings
    payload["total_vulnerabilities"] = len(findings)
    return payload


__all__ = ["DEFAULT_SOURCE", "sanitize_finding_payload", "sanitize_report_payload"]
