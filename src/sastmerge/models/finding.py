# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Finding dataclasses: raw scanner records and their enriched form."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Any

DEFAULT_CHECK_ID = "unknown"
DEFAULT_PATH = "Unknown"
DEFAULT_MESSAGE = "Unknown vulnerability"


class Severity(str, Enum):
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def outranks(self, other: Severity) -> bool:
        return self.rank > other.rank

    @classmethod
    def parse(cls, value: Any) -> Severity:
        """
        Normalize a scanner severity label.

        Labels are case-insensitive. Vocabulary from other tools is folded onto the three
        levels; anything absent or unknown is ``INFO``.
        """
        raw = str(value or "").strip().upper()
        if raw in cls.__members__:
            return cls[raw]
        return _SEVERITY_ALIASES.get(raw, cls.INFO)


_SEVERITY_RANK = {Severity.INFO: 0, Severity.WARNING: 1, Severity.ERROR: 2}
_SEVERITY_ALIASES = {
    "CRITICAL": Severity.ERROR,
    "HIGH": Severity.ERROR,
    "MEDIUM": Severity.WARNING,
    "MODERATE": Severity.WARNING,
    "LOW": Severity.INFO,
    "NOTE": Severity.INFO,
    "NONE": Severity.INFO,
}


def _coerce_int(value: Any, default: int | None) -> int | None:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class Position:
    line: int = 0
    col: int | None = None

    @classmethod
    def from_mapping(cls, data: Any) -> Position:
        if not isinstance(data, Mapping):
            return cls()
        return cls(
            line=_coerce_int(data.get("line"), 0) or 0,
            col=_coerce_int(data.get("col"), None),
        )

    def to_dict(self) -> dict[str, int]:
        payload = {"line": self.line}
        if self.col is not None:
            payload["col"] = self.col
        return payload


def composite_key(check_id: str, path: str, line: int) -> str:
    """Deduplication identity shared by every scanner: ``check_id:path:line``."""
    return f"{check_id}:{path}:{line}"


@dataclass(frozen=True)
class Finding:
    """One raw scanner result after the schema-with-defaults boundary."""

    check_id: str = DEFAULT_CHECK_ID
    path: str = DEFAULT_PATH
    start: Position = field(default_factory=Position)
    end: Position = field(default_factory=Position)
    message: str = DEFAULT_MESSAGE
    severity: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)
    source: str | None = None

    @property
    def key(self) -> str:
        return composite_key(self.check_id, self.path, self.start.line)

    @property
    def reported_severity(self) -> str | None:
        """Severity label as reported: the nested metadata field wins over the top-level one."""
        nested = self.metadata.get("severity")
        if nested:
            return str(nested)
        return self.severity or None

    def with_source(self, source: str) -> Finding:
        return replace(self, source=source)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> Finding:
        """
        Normalize one scanner record.

        Scanners disagree on shape: Semgrep nests message/severity under ``extra`` while the
        others report them at the top level. Everything downstream reads this dataclass only.
        """
        if not isinstance(data, Mapping):
            data = {}
        raw_extra = data.get("extra")
        extra: dict[str, Any] = dict(raw_extra) if isinstance(raw_extra, Mapping) else {}

        message = _text(extra.get("message")) or _text(data.get("message")) or DEFAULT_MESSAGE
        severity = data.get("severity")
        return cls(
            check_id=_text(data.get("check_id")) or DEFAULT_CHECK_ID,
            path=_text(data.get("path")) or DEFAULT_PATH,
            start=Position.from_mapping(data.get("start")),
            end=Position.from_mapping(data.get("end")),
            message=message,
            severity=_text(severity) or None,
            metadata=extra,
        )


@dataclass(frozen=True)
class EnrichedFinding:
    """A deduplicated finding with normalized severity and generated guidance."""

    check_id: str
    path: str
    start: Position
    end: Position
    message: str
    source: str
    severity: Severity
    description: str
    remediation: str
    owasp_category: str | None = None
    cwe_id: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def key(self) -> str:
        return composite_key(self.check_id, self.path, self.start.line)

    def to_dict(self) -> dict[str, Any]:
        extra: dict[str, Any] = dict(self.metadata)
        extra.update(
            {
                "message": self.message,
                "severity": self.severity.value,
                "description": self.description,
                "remediation": self.remediation,
            }
        )
        if self.owasp_category:
            extra["owasp_category"] = self.owasp_category
        if self.cwe_id:
            extra["cwe_id"] = self.cwe_id
        return {
            "check_id": self.check_id,
            "path": self.path,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "source": self.source,
            "severity": self.severity.value.lower(),
            "extra": extra,
        }

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EnrichedFinding:
        """Rebuild a stored finding (e.g. from the history endpoint) without re-enriching it."""
        finding = Finding.from_mapping(data)
        extra = dict(finding.metadata)
        description = _text(extra.pop("description", None))
        remediation = _text(extra.pop("remediation", None))
        owasp = extra.pop("owasp_category", None)
        cwe = extra.pop("cwe_id", None)
        severity = Severity.parse(finding.reported_severity)
        extra.pop("message", None)
        extra.pop("severity", None)
        return cls(
            check_id=finding.check_id,
            path=finding.path,
            start=finding.start,
            end=finding.end,
            message=finding.message,
            source=_text(data.get("source")) or "Unknown",
            severity=severity,
            description=description or finding.message,
            remediation=remediation,
            owasp_category=_text(owasp) or None,
            cwe_id=_text(cwe) or None,
            metadata=extra,
        )


__all__ = [
    "DEFAULT_CHECK_ID",
    "DEFAULT_MESSAGE",
    "DEFAULT_PATH",
    "EnrichedFinding",
    "Finding",
    "Position",
    "Severity",
    "composite_key",
]
