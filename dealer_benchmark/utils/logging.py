"""
Log output for dealer CSV batches.

``configure_logging(config)`` is called by each CLI command after the config
is loaded and before the first upload is read.  Library modules only ever
ask for ``logging.getLogger(__name__)``.

Batch context
-------------
``pipeline.batch`` tags its records with ``extra={"run_slug": ..., "file_name": ...}``
so a failed upload can be traced back to its batch.  Both formatters surface
those tags:

  plain text (default)::

    2025-03-01T09:12:44Z [WARNING] dealer_benchmark.pipeline.batch: File latin1.csv FAILED: ... [run=4f0c... file=latin1.csv]

  JSON lines (``json_format = true`` under ``[logging]``)::

    {"ts": "2025-03-01T09:12:44Z", "level": "WARNING", "logger": "dealer_benchmark.pipeline.batch",
     "msg": "File latin1.csv FAILED: ...", "run_slug": "4f0c...", "file_name": "latin1.csv"}

Records go to stderr; stdout carries only KPI tables and the batch summary.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dealer_benchmark.config import LoggingConfig

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Batch tags, in the order the plain-text suffix shows them.
CONTEXT_FIELDS: tuple[tuple[str, str], ...] = (("run_slug", "run"), ("file_name", "file"))

_STANDARD_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None))
) | {"message", "asctime", "taskName"}


class BatchTextFormatter(logging.Formatter):
    """``LOG_FORMAT`` line with a ``[run=... file=...]`` suffix when tagged."""

    def __init__(self) -> None:
        super().__init__(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        return _utc_stamp(record)

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        tags = [
            f"{label}={getattr(record, attr)}"
            for attr, label in CONTEXT_FIELDS
            if getattr(record, attr, None)
        ]
        return f"{line} [{' '.join(tags)}]" if tags else line


class BatchJsonFormatter(logging.Formatter):
    """One JSON object per record.

    Keys: ``ts``, ``level``, ``logger``, ``msg``; ``exc`` when a traceback is
    attached; then every ``extra=`` key (``run_slug``, ``file_name``, ...).
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: dict = {
            "ts": _utc_stamp(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        payload.update(
            (key, val) for key, val in record.__dict__.items()
            if key not in _STANDARD_RECORD_ATTRS and not key.startswith("_")
        )
        return json.dumps(payload, default=str)


def build_formatter(config: "LoggingConfig") -> logging.Formatter:
    return BatchJsonFormatter() if config.json_format else BatchTextFormatter()


def configure_logging(config: "LoggingConfig") -> None:
    """Install stderr (and optionally file) handlers on the root logger.

    Args:
        config: ``[logging]`` section of ``AppConfig``.  ``log_file`` may
            point into a directory that does not exist yet.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)
    formatter = build_formatter(config)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    logging.basicConfig(level=level, handlers=handlers, force=True)


def _utc_stamp(record: logging.LogRecord) -> str:
    return datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(LOG_DATE_FORMAT)
