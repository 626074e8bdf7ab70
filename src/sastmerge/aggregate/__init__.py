# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Aggregation of scanner outputs into a combined report."""

from .aggregator import Aggregator, combine_results, enrich, merge_findings
from .sanitize import sanitize_finding_payload, sanitize_report_payload

__all__ = [
    "Aggregator",
    "combine_results",
    "enrich",
    "merge_findings",
    "sanitize_finding_payload",
    "sanitize_report_payload",
]
