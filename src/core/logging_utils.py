"""
Structured logging helpers for the audit pipeline.
"""

from __future__ import annotations

import json
import logging
from typing import Any


def log_event(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    """
    Emit one structured log line as compact JSON.
    """

    payload = {"event": event, **fields}
    logger.log(level, json.dumps(payload, default=str, sort_keys=True))


def configure_logging(*, verbose: bool = False, handler: logging.Handler | None = None) -> None:
    """Install a single root handler (Rich in the CLI, plain stream elsewhere)."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[handler or logging.StreamHandler()],
        force=True,
    )
    # httpx logs every request at INFO; too noisy for a few thousand probes.
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
