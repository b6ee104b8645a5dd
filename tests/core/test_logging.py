"""Tests for hl_bootstrap.core.logging module."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from hl_bootstrap.core.config import load_settings, set_config
from hl_bootstrap.core.logging import (
    JSONFormatter,
    StandardFormatter,
    configure_logging,
    get_run_id,
    run_context,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(msg="hello", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="hl_bootstrap.test",
        level=level,
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


# ============================================================================
# Run ID Tests
# ============================================================================


class TestRunId:
    """Tests for run ID context handling."""

    def test_default_none(self):
        assert get_run_id() is None

    def test_generated_ids_unique(self):
        with run_context() as first, run_context() as second:
            assert first != second

    def test_run_context_generates_id(self):
        with run_context() as rid:
            assert rid
            assert get_run_id() == rid
        assert get_run_id() is None

    def test_run_context_explicit_id(self):
        with run_context("run-123") as rid:
            assert rid == "run-123"
            assert get_run_id() == "run-123"

    def test_nested_contexts_restore(self):
        with run_context("outer"):
            with run_context("inner"):
                assert get_run_id() == "inner"
            assert get_run_id() == "outer"


# ============================================================================
# Formatter Tests
# ============================================================================


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "hl_bootstrap.test"
        assert data["message"] == "hello"
        assert "timestamp" in data
        assert "source" not in data

    def test_includes_run_id(self):
        with run_context("abc"):
            data = json.loads(JSONFormatter().format(_record()))
        assert data["run_id"] == "abc"

    def test_warning_has_source(self):
        data = json.loads(JSONFormatter().format(_record(level=logging.WARNING)))
        assert data["source"]["line"] == 42

    def test_extra_data(self):
        record = _record(extra_data={"address": "1.2.3.4", "latency_ms": 12.5})
        data = json.loads(JSONFormatter().format(record))
        assert data["extra"] == {"address": "1.2.3.4", "latency_ms": 12.5}

    def test_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record(level=logging.ERROR)
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in data["exception"]


class TestStandardFormatter:
    """Tests for StandardFormatter."""

    def test_plain_message(self):
        output = StandardFormatter(use_colors=False).format(_record())
        assert "hl_bootstrap.test" in output
        assert "INFO" in output
        assert output.endswith("hello")

    def test_run_id_prefix(self):
        with run_context("0123456789abcdef"):
            output = StandardFormatter(use_colors=False).format(_record())
        assert "[01234567] hello" in output

    def test_does_not_mutate_record(self):
        record = _record()
        with run_context("0123456789abcdef"):
            StandardFormatter(use_colors=False).format(record)
        assert record.msg == "hello"


# ============================================================================
# configure_logging Tests
# ============================================================================


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_json_format(self, restore_root_logger):
        configure_logging("DEBUG", json_format=True)

        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_text_format_from_settings(self, restore_root_logger):
        set_config(load_settings(log_format="text", log_level="WARNING"))
        configure_logging()

        root = restore_root_logger
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, StandardFormatter)

    def test_log_file_uses_json(self, restore_root_logger, tmp_path):
        log_file = tmp_path / "bootstrap.log"
        configure_logging("INFO", json_format=False, log_file=str(log_file))

        logging.getLogger("hl_bootstrap.test").info("to file")
        for handler in restore_root_logger.handlers:
            handler.flush()

        line = log_file.read_text().strip().splitlines()[-1]
        assert json.loads(line)["message"] == "to file"

    def test_quiets_aiohttp(self, restore_root_logger):
        configure_logging("DEBUG", json_format=True)
        assert logging.getLogger("aiohttp").level == logging.WARNING

    def test_unknown_level_falls_back_to_info(self, restore_root_logger):
        configure_logging("CHATTY", json_format=True)
        assert restore_root_logger.level == logging.INFO
