# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Semgrep rule catalog entries as served by the scan API."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any


def _strings(value: Any) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        return ()
    return tuple(str(item) for item in value if item)


@dataclass(frozen=True)
class SemgrepRule:
    """
    One registry rule. ``id`` is what ``scan --rule-id`` sends to Semgrep.

    Catalog listings carry a summary only; ``definition`` is set when the rule was fetched
    individually.
    """

    id: str
    name: str = ""
    path: str = ""
    severity: str = ""
    rule_type: str = ""
    description: str = ""
    languages: tuple[str, ...] = ()
    definition: Mapping[str, Any] | None = field(default=None, compare=False, hash=False)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, rule_id: str | None = None) -> SemgrepRule:
        meta = data.get("meta")
        meta = meta if isinstance(meta, Mapping) else {}
        # Languages live at the top level for some registry entries and under ``meta`` for others.
        languages = _strings(data.get("languages")) or _strings(meta.get("languages"))
        definition = data.get("definition")
        return cls(
            id=str(rule_id or data.get("id") or ""),
            name=str(data.get("name") or ""),
            path=str(data.get("path") or ""),
            severity=str(data.get("severity") or meta.get("severity") or "").upper(),
            rule_type=str(data.get("rule_type") or ""),
            description=str(data.get("description") or meta.get("description") or ""),
            languages=languages,
            definition=dict(definition) if isinstance(definition, Mapping) else None,
        )


@dataclass(frozen=True)
class RulePage:
    rules: tuple[SemgrepRule, ...] = ()
    total: int = 0
    has_more: bool = False


__all__ = ["RulePage", "SemgrepRule"]
