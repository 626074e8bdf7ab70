# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Pipeline transition table.

Each non-terminal state maps to the action the controller runs in it and the
state it moves to when that action succeeds or fails. The stage order is fixed:
Semgrep, ShiftLeft, CodeQL.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..models.pipeline import STAGE_ORDER, Phase, Stage, next_stage

StateKey = tuple[Phase, Stage | None]

FAILED: StateKey = (Phase.FAILED, None)


@dataclass(frozen=True)
class Transition:
    action: str
    on_success: StateKey
    on_failure: StateKey = FAILED


def _build_transitions() -> dict[StateKey, Transition]:
    table: dict[StateKey, Transition] = {
        (Phase.IDLE, None): Transition("validate", (Phase.UPLOADING, STAGE_ORDER[0])),
    }
    for stage in STAGE_ORDER:
        following = next_stage(stage)
        table[(Phase.UPLOADING, stage)] = Transition("upload", (Phase.PROCESSING, stage))
        table[(Phase.PROCESSING, stage)] = Transition(
            "process",
            (Phase.UPLOADING, following) if following is not None else (Phase.AGGREGATING, None),
        )
    table[(Phase.AGGREGATING, None)] = Transition("aggregate", (Phase.DONE, None))
    return table


TRANSITIONS: dict[StateKey, Transition] = _build_transitions()


__all__ = ["FAILED", "StateKey", "TRANSITIONS", "Transition"]
