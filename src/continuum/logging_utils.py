"""Logging setup and append-only event log."""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping

from continuum.config import get_settings

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
LOG_FILE_NAME = "events.jsonl"
LOGGER_NAME = "continuum"

LOGGER = logging.getLogger(LOGGER_NAME)


def setup_logging(level: int = logging.INFO, extra_loggers: Iterable[str] | None = None) -> None:
    logging.basicConfig(level=level, format=LOG_FORMAT)
    for logger_name in extra_loggers or []:
        logging.getLogger(logger_name).setLevel(level)


def events_path() -> Path:
    """Location of the JSONL event log under the configured log directory."""

    return Path(get_settings().log_dir) / LOG_FILE_NAME


def log_event(data: Mapping[str, Any]) -> None:
    """Record a settings or scheduling change as one JSON line.

    The line is also echoed to the ``continuum`` logger. An unwritable log
    directory only costs the file copy.
    """

    event = dict(data)
    name = event.pop("event", "unknown")
    record = {"timestamp": datetime.now(timezone.utc).isoformat(), "event": name, **event}
    path = events_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            print(json.dumps(record, ensure_ascii=False, default=str), file=handle)
    except OSError as exc:
        LOGGER.warning("Could not append to %s: %s", path, exc)

    LOGGER.info("Event %s | %s", name, event)


__all__ = ["LOG_FORMAT", "LOGGER", "LOGGER_NAME", "setup_logging", "events_path", "log_event"]
