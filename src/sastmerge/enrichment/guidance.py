# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pure enrichment functions: description, taxonomy mapping and remediation."""

from __future__ import annotations

from ..models.finding import Severity
from .rules import (
    CWE_RULES,
    DESCRIPTION_RULES,
    ERROR_REMEDIATION,
    GENERIC_REMEDIATION,
    OWASP_RULES,
    REMEDIATION_RULES,
    SOURCE_REMEDIATIONS,
    SOURCE_TECHNIQUES,
    WARNING_REMEDIATION,
    first_match,
)


def generate_description(check_id: str, message: str, source: str) -> str:
    """Raw message, then at most one category sentence, then the scanner's technique sentence."""
    description = message or ""
    description += first_match(DESCRIPTION_RULES, check_id, message) or ""
    description += SOURCE_TECHNIQUES.get(source, "")
    return description


def map_to_owasp(check_id: str, message: str) -> str | None:
    return first_match(OWASP_RULES, check_id, message)


def map_to_cwe(check_id: str, message: str) -> str | None:
    return first_match(CWE_RULES, check_id, message)


def generate_remediation(check_id: str, message: str, source: str, severity: Severity) -> str:
    """
    Remediation guidance for a finding; never empty.

    Precedence: vulnerability category, then scanner-specific wording, then severity, then a
    generic sentence.
    """
    by_category = first_match(REMEDIATION_RULES, check_id, message)
    if by_category:
        return by_category

    lower_message = (message or "").lower()
    for rule_source, keyword, guidance in SOURCE_REMEDIATIONS:
        if source == rule_source and keyword in lower_message:
            return guidance

    if severity is Severity.ERROR:
        return ERROR_REMEDIATION
    if severity is Severity.WARNING:
        return WARNING_REMEDIATION
    return GENERIC_REMEDIATION


__all__ = [
    "generate_description",
    "generate_remediation",
    "map_to_cwe",
    "map_to_owasp",
]
