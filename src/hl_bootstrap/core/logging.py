# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Logging setup for hl-bootstrap.

Records go to stderr, as JSON lines when stderr is not a terminal (systemd,
containers) and as colored text otherwise. Every line logged inside
``run_context()`` carries the run's ID, so one bootstrap can be picked out of
a shared journal.
"""

from __future__ import annotations

import json
import logging
import sys
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

_run_id: ContextVar[str | None] = ContextVar("run_id", default=None)

NOISY_LOGGERS = ("aiohttp", "asyncio")


def get_run_id() -> str | None:
    """The ID of the current bootstrap run, or None outside of one."""
    return _run_id.get()


@contextmanager
def run_context(run_id: str | None = None) -> Iterator[str]:
    """Bind ``run_id`` (a fresh one if omitted) to everything logged inside."""
    token = _run_id.set(run_id or uuid.uuid4().hex)
    try:
        yield _run_id.get()
    finally:
        _run_id.reset(token)


class JSONFormatter(logging.Formatter):
    """One JSON object per record.

    Warnings and errors also carry their source location. ``extra_data``
    passed through ``extra=`` lands under ``"extra"``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if run_id := get_run_id():
            entry["run_id"] = run_id
        if record.levelno >= logging.WARNING:
            entry["source"] = {"file": record.pathname, "line": record.lineno, "function": record.funcName}
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        if hasattr(record, "extra_data"):
            entry["extra"] = record.extra_data
        return json.dumps(entry, default=str)


class StandardFormatter(logging.Formatter):
    """``time - logger - LEVEL - [run] message`` with ANSI level colors on a TTY."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    DIM = "\033[90m"
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True):
        super().__init__(fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        self.use_colors = use_colors and sys.stderr.isatty()

    def _paint(self, text: str, color: str) -> str:
        return f"{color}{text}{self.RESET}" if self.use_colors else text

    def format(self, record: logging.LogRecord) -> str:
        # Formatting works on a copy; other handlers see the record untouched
        record = logging.makeLogRecord(record.__dict__)
        if run_id := get_run_id():
            record.msg = f"{self._paint(f'[{run_id[:8]}]', self.DIM)} {record.msg}"
        record.levelname = self._paint(record.levelname, self.LEVEL_COLORS.get(record.levelno, ""))
        return super().format(record)


def _wants_json(log_format: str) -> bool:
    log_format = log_format.lower()
    if log_format in ("json", "text"):
        return log_format == "json"
    return not sys.stderr.isatty()


def configure_logging(
    level: str | int | None = None,
    json_format: bool | None = None,
    log_file: str | None = None,
) -> None:
    """Replace the root logger's handlers with hl-bootstrap's.

    Arguments left as None come from the loaded settings
    (``HL_BOOTSTRAP_LOG_LEVEL``, ``HL_BOOTSTRAP_LOG_FORMAT``,
    ``HL_BOOTSTRAP_LOG_FILE``). The log file, if any, always gets JSON.
    """
    from .config import get_config

    config = get_config()
    level = config.log_level if level is None else level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    if json_format is None:
        json_format = _wants_json(config.log_format)
    log_file = config.log_file if log_file is None else log_file

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    handlers[0].setFormatter(JSONFormatter() if json_format else StandardFormatter())
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())
        handlers.append(file_handler)

    root = logging.getLogger()
    root.setLevel(level)
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
