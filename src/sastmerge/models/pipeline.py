# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pipeline domain models: stages, phases and the run state value object."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from pathlib import Path
from typing import Any

from .finding import Finding
from .report import CombinedReport


class Stage(str, Enum):
    SEMGREP = "Semgrep"
    SHIFTLEFT = "ShiftLeft"
    CODEQL = "CodeQL"

    @property
    def score_key(self) -> str:
        return self.name.lower()

    @property
    def endpoint(self) -> str:
        """Path of the scanner endpoint relative to the scan API base URL."""
        return _STAGE_ENDPOINTS[self]

    @property
    def accepts_rule(self) -> bool:
        return self is Stage.SEMGREP

    @property
    def failure_message(self) -> str:
        return f"Failed to scan file with {self.value}"


_STAGE_ENDPOINTS = {
    Stage.SEMGREP: "/upload",
    Stage.SHIFTLEFT: "/shiftleft",
    Stage.CODEQL: "/codeql",
}

STAGE_ORDER: tuple[Stage, ...] = (Stage.SEMGREP, Stage.SHIFTLEFT, Stage.CODEQL)


def next_stage(stage: Stage) -> Stage | None:
    index = STAGE_ORDER.index(stage)
    return STAGE_ORDER[index + 1] if index + 1 < len(STAGE_ORDER) else None


@dataclass(frozen=True)
class Artifact:
    """The uploaded code artifact: one file (source file or archive) sent to every scanner."""

    file_name: str
    content: bytes

    @classmethod
    def from_path(cls, path: str | Path) -> Artifact:
        file_path = Path(path)
        return cls(file_name=file_path.name, content=file_path.read_bytes())

    @property
    def extension(self) -> str:
        return Path(self.file_name).suffix.lower()


@dataclass(frozen=True)
class RuleSelection:
    """
    Optional Semgrep rule choice.

    ``custom_rule`` is a JSON rule document and must be validated before sending;
    ``rule_id`` names a registry rule and is sent as-is. A custom rule wins when both are set.
    """

    custom_rule: str | None = None
    rule_id: str | None = None

    @property
    def form_value(self) -> str | None:
        if self.custom_rule:
            return self.custom_rule
        return self.rule_id or None


class Phase(str, Enum):
    IDLE = "IDLE"
    UPLOADING = "UPLOADING"
    PROCESSING = "PROCESSING"
    AGGREGATING = "AGGREGATING"
    DONE = "DONE"
    FAILED = "FAILED"


@dataclass(frozen=True)
class ScannerOutput:
    """Parsed success payload of one scanner: ``{vulnerabilities, security_score}``."""

    findings: tuple[Finding, ...] = ()
    score: float = 0.0

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ScannerOutput:
        raw = payload.get("vulnerabilities")
        items = raw if isinstance(raw, list) else []
        score = payload.get("security_score")
        try:
            parsed_score = float(score) if score is not None and not isinstance(score, bool) else 0.0
        except (TypeError, ValueError):
            parsed_score = 0.0
        return cls(
            findings=tuple(Finding.from_mapping(item) for item in items if isinstance(item, Mapping)),
            score=parsed_score,
        )


@dataclass(frozen=True)
class PipelineState:
    """
    Single source of truth for a run's progress.

    ``phase`` and ``stage`` together name the state; ``stage`` is only set while a scanner is
    uploading or processing, so "uploading two scanners at once" cannot be expressed.
    """

    run_id: int = 0
    phase: Phase = Phase.IDLE
    stage: Stage | None = None
    outputs: tuple[tuple[Stage, ScannerOutput], ...] = ()
    report: CombinedReport | None = None
    error: str | None = None
    failed_stage: Stage | None = None

    @property
    def is_terminal(self) -> bool:
        return self.phase in (Phase.DONE, Phase.FAILED)

    @property
    def is_busy(self) -> bool:
        return self.phase in (Phase.UPLOADING, Phase.PROCESSING, Phase.AGGREGATING)

    def is_uploading(self, stage: Stage) -> bool:
        return self.phase is Phase.UPLOADING and self.stage is stage

    def is_processing(self, stage: Stage) -> bool:
        return self.phase is Phase.PROCESSING and self.stage is stage

    def output_for(self, stage: Stage) -> ScannerOutput | None:
        for recorded, output in self.outputs:
            if recorded is stage:
                return output
        return None

    def moved_to(self, phase: Phase, stage: Stage | None = None) -> PipelineState:
        return replace(self, phase=phase, stage=stage)

    def with_output(self, stage: Stage, output: ScannerOutput) -> PipelineState:
        return replace(self, outputs=self.outputs + ((stage, output),))

    def with_report(self, report: CombinedReport) -> PipelineState:
        return replace(self, report=report)

    def failed(self, message: str) -> PipelineState:
        return replace(
            self,
            phase=Phase.FAILED,
            stage=None,
            report=None,
            error=message,
            failed_stage=self.stage,
        )

    def describe(self) -> str:
        if self.stage is not None:
            return f"{self.phase.value.title()} ({self.stage.value})"
        return self.phase.value.title()


__all__ = [
    "Artifact",
    "Phase",
    "PipelineState",
    "RuleSelection",
    "STAGE_ORDER",
    "ScannerOutput",
    "Stage",
    "next_stage",
]
