# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pre-flight checks run before any scanner is contacted."""

from __future__ import annotations

import json
from typing import Any

from ..errors import ValidationFailure
from ..models.pipeline import Artifact, RuleSelection

# File types the scan service accepts, mirroring its upload filter.
ACCEPTED_EXTENSIONS = frozenset(
    {
        ".zip",
        ".py",
        ".js",
        ".ts",
        ".java",
        ".cpp",
        ".c",
        ".cs",
        ".php",
        ".rb",
        ".go",
        ".rs",
        ".txt",
        ".exe",
        ".sh",
    }
)


def validate_artifact(artifact: Artifact | None) -> Artifact:
    if artifact is None or not artifact.file_name or not artifact.content:
        raise ValidationFailure("No file selected for scanning")
    if artifact.extension not in ACCEPTED_EXTENSIONS:
        raise ValidationFailure(f"Unsupported file type: {artifact.extension or artifact.file_name}")
    return artifact


def validate_custom_rule(rule: str) -> dict[str, Any]:
    """Parse a user-supplied Semgrep rule document; it must be JSON with a ``rules`` list."""
    if not rule or not rule.strip():
        raise ValidationFailure("Custom rule cannot be empty")
    try:
        parsed = json.loads(rule)
    except ValueError as exc:
        raise ValidationFailure("Invalid JSON format") from exc
    if not isinstance(parsed, dict) or not isinstance(parsed.get("rules"), list):
        raise ValidationFailure('Custom rule must contain a "rules" array')
    return parsed


def validate_inputs(artifact: Artifact | None, rule: RuleSelection | None = None) -> None:
    validate_artifact(artifact)
    if rule is not None and rule.custom_rule is not None:
        validate_custom_rule(rule.custom_rule)


__all__ = ["ACCEPTED_EXTENSIONS", "validate_artifact", "validate_custom_rule", "validate_inputs"]
