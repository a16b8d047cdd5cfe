"""Tests for logging setup."""

from __future__ import annotations

import json
import logging

import pytest

from barrage._internal.logging import (
    QUIET,
    TRACE,
    _JsonFormatter,
    get_logger,
    setup_logging,
    verbosity_to_level,
)


class TestVerbosityToLevel:
    @pytest.mark.parametrize(
        ("verbose", "level"),
        [
            (0, logging.ERROR),
            (1, logging.WARNING),
            (2, logging.INFO),
            (3, logging.DEBUG),
            (4, TRACE),
            (9, TRACE),
        ],
    )
    def test_levels(self, verbose: int, level: int):
        assert verbosity_to_level(verbose) == level

    def test_quiet_wins(self):
        assert verbosity_to_level(3, quiet=True) == QUIET
        assert QUIET > logging.CRITICAL


class TestSetupLogging:
    def test_idempotent(self):
        logger = setup_logging(logging.WARNING)
        again = setup_logging(logging.DEBUG)

        assert again is logger
        (handler,) = again.handlers
        assert isinstance(handler, logging.StreamHandler)
        assert handler.level == logging.DEBUG
        assert again.level == logging.DEBUG
        assert not again.propagate

    def test_writes_to_current_stderr(self, capsys: pytest.CaptureFixture[str]):
        setup_logging(logging.WARNING)
        get_logger("tests").warning("volley %d", 7)
        get_logger("tests").info("not shown")

        err = capsys.readouterr().err
        assert "volley 7" in err
        assert "not shown" not in err

    def test_switch_to_json(self, capsys: pytest.CaptureFixture[str]):
        setup_logging(logging.INFO, json_format=True)
        try:
            get_logger("tests").info("as json")
            entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
            assert entry["message"] == "as json"
            assert entry["logger"] == "barrage.tests"
        finally:
            setup_logging(logging.WARNING)

    def test_get_logger_namespace(self):
        assert get_logger("engine.soldier").name == "barrage.engine.soldier"

    def test_trace_level_name(self):
        assert logging.getLevelName(TRACE) == "TRACE"


class TestJsonFormatter:
    def test_one_line_json(self):
        record = logging.LogRecord(
            name="barrage.engine.general",
            level=logging.WARNING,
            pathname=__file__,
            lineno=1,
            msg="Stopping since signal %d was received ...",
            args=(2,),
            exc_info=None,
        )
        entry = json.loads(_JsonFormatter().format(record))

        assert entry["level"] == "WARNING"
        assert entry["logger"] == "barrage.engine.general"
        assert entry["message"] == "Stopping since signal 2 was received ..."
        assert "thread" in entry
