# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging helpers for SASTMerge."""

from __future__ import annotations

import logging
import os

DEFAULT_LOG_LEVEL = os.getenv("SASTMERGE_LOG_LEVEL", "WARNING").upper()

# httpx logs every request at INFO; keep that out of pipeline progress output.
_NOISY_LOGGERS = ("httpx", "httpcore")


def resolve_log_level(level: str | None = None) -> int:
    effective_level = (level or os.getenv("SASTMERGE_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    resolved = getattr(logging, effective_level, None)
    return resolved if isinstance(resolved, int) else logging.WARNING


def setup_logging(level: str | None = None) -> None:
    """Configure standard logging for CLI/library use."""
    resolved = resolve_log_level(level)
    logging.basicConfig(
        level=resolved,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if resolved > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


__all__ = ["resolve_log_level", "setup_logging"]
