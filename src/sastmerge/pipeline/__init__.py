# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Pipeline orchestration: validation, transition table and controller."""

from .controller import AGGREGATION_FAILURE_MESSAGE, PipelineController, StateListener
from .transitions import TRANSITIONS, Transition
from .validation import ACCEPTED_EXTENSIONS, validate_artifact, validate_custom_rule, validate_inputs

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "AGGREGATION_FAILURE_MESSAGE",
    "PipelineController",
    "StateListener",
    "TRANSITIONS",
    "Transition",
    "validate_artifact",
    "validate_custom_rule",
    "validate_inputs",
]
