# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Sequential scanner pipeline: Semgrep, ShiftLeft, CodeQL, then aggregation."""

from __future__ import annotations

import itertools
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from ..aggregate.aggregator import Aggregator
from ..clients.scanner import ScannerClient
from ..clients.store import ResultStoreClient
from ..config import PipelineSettings, load_pipeline_settings
from ..errors import AggregationFailure, SastMergeError, TransportFailure, ValidationFailure
from ..http.models import HttpResponse
from ..models.pipeline import Artifact, Phase, PipelineState, RuleSelection, Stage
from .transitions import TRANSITIONS, Transition
from .validation import validate_inputs

logger = logging.getLogger(__name__)

StateListener = Callable[[PipelineState], None]

AGGREGATION_FAILURE_MESSAGE = "Failed to combine scan results"
GENERIC_FAILURE_MESSAGE = "An error occurred during scanning"


@dataclass
class _RunInputs:
    artifact: Artifact | None
    rule: RuleSelection | None
    response: HttpResponse | None = None


def _active_stage(state: PipelineState) -> Stage:
    if state.stage is None:
        raise SastMergeError(f"No scanner is active while {state.describe().lower()}")
    return state.stage


def _failed(state: PipelineState, transition: Transition, message: str) -> PipelineState:
    # The error and the stage it happened in are kept whatever phase the table names.
    return state.failed(message).moved_to(*transition.on_failure)


def _validated_artifact(inputs: _RunInputs) -> Artifact:
    # Only reachable after the validate transition, which rejects a missing artifact.
    if inputs.artifact is None:
        raise ValidationFailure("No file selected for scanning")
    return inputs.artifact


class PipelineController:
    """
    Drives one scan run at a time through the transition table.

    Every ``run`` starts from a fresh state and supersedes whatever ran before; a superseded
    run stops at its next transition without touching the controller's state.
    """

    def __init__(
        self,
        scanner: ScannerClient,
        *,
        aggregator: Aggregator | None = None,
        store: ResultStoreClient | None = None,
        settings: PipelineSettings | None = None,
    ):
        self.scanner = scanner
        self.aggregator = aggregator or Aggregator()
        self.store = store
        self.settings = settings or load_pipeline_settings()
        self._state = PipelineState()
        self._run_ids = itertools.count(1)
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> PipelineState:
        return self._state

    def subscribe(self, listener: StateListener) -> None:
        self._listeners.append(listener)

    def clear(self) -> None:
        """Drop the current result or error and return to Idle."""
        self._state = PipelineState(run_id=next(self._run_ids))
        self._notify(self._state)

    def run(self, artifact: Artifact | None, rule: RuleSelection | None = None) -> PipelineState:
        state = PipelineState(run_id=next(self._run_ids))
        inputs = _RunInputs(artifact=artifact, rule=rule)
        self._state = state
        self._notify(state)

        while not state.is_terminal:
            transition = TRANSITIONS[(state.phase, state.stage)]
            try:
                state = getattr(self, f"_{transition.action}")(state, inputs)
            except SastMergeError as exc:
                state = _failed(state, transition, exc.message)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Unexpected error in %s: %s", state.describe(), exc)
                failure = state.stage.failure_message if state.stage is not None else GENERIC_FAILURE_MESSAGE
                state = _failed(state, transition, failure)
            else:
                next_phase, next_stage = transition.on_success
                if next_phase is Phase.UPLOADING and state.phase is Phase.PROCESSING:
                    self._settle()
                state = state.moved_to(next_phase, next_stage)

            if not self._apply(state):
                return state

        if state.error is not None:
            logger.warning("Pipeline run %d failed: %s", state.run_id, state.error)
        elif state.report is not None:
            self._persist(state)
        return state

    def _validate(self, state: PipelineState, inputs: _RunInputs) -> PipelineState:
        validate_inputs(inputs.artifact, inputs.rule)
        return state

    def _upload(self, state: PipelineState, inputs: _RunInputs) -> PipelineState:
        stage = _active_stage(state)
        rule = inputs.rule if stage.accepts_rule else None
        inputs.response = self.scanner.submit(stage, _validated_artifact(inputs), rule)
        return state

    def _process(self, state: PipelineState, inputs: _RunInputs) -> PipelineState:
        stage = _active_stage(state)
        response, inputs.response = inputs.response, None
        if response is None:
            raise TransportFailure(stage.failure_message, stage=stage.value)
        return state.with_output(stage, self.scanner.parse(stage, response))

    def _aggregate(self, state: PipelineState, inputs: _RunInputs) -> PipelineState:
        file_name = _validated_artifact(inputs).file_name
        try:
            report = self.aggregator.aggregate(file_name, dict(state.outputs))
        except Exception as exc:
            logger.exception("Error combining scan results: %s", exc)
            raise AggregationFailure(AGGREGATION_FAILURE_MESSAGE) from exc
        return state.with_report(report)

    def _settle(self) -> None:
        if self.settings.settle_interval > 0:
            time.sleep(self.settings.settle_interval)

    def _persist(self, state: PipelineState) -> None:
        if self.store is None or not self.settings.persist_results or state.report is None:
            return
        try:
            self.store.save(state.report)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error storing combined results: %s", exc)

    def _apply(self, state: PipelineState) -> bool:
        if state.run_id != self._state.run_id:
            logger.info("Discarding update from superseded run %d (%s)", state.run_id, state.describe())
            return False
        self._state = state
        self._notify(state)
        return True

    def _notify(self, state: PipelineState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:  # noqa: BLE001
                logger.exception("Pipeline listener failed: %s", exc)


__all__ = ["AGGREGATION_FAILURE_MESSAGE", "PipelineController", "StateListener"]
