# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Keyword-table enrichment for scanner findings."""

from .guidance import generate_description, generate_remediation, map_to_cwe, map_to_owasp
from .rules import KeywordRule, first_match

__all__ = [
    "KeywordRule",
    "first_match",
    "generate_description",
    "generate_remediation",
    "map_to_cwe",
    "map_to_owasp",
]
