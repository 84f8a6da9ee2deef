"""
Structured logging helpers for dataset lifecycle events.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one dataset lifecycle event as a compact, key-sorted JSON line.
    """

    if not logger.isEnabledFor(level):
        return
    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def elapsed_ms(started_monotonic: float) -> float:
    """
    Milliseconds since *started_monotonic*, rounded for log output.
    """

    return round((time.monotonic() - started_monotonic) * 1000.0, 2)
