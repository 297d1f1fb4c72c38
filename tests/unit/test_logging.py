"""Tests for the calcexpr.logging module."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog

from calcexpr.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
)


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_logging_default(self) -> None:
        """Default configuration installs one stderr handler."""
        configure_logging()

        root_logger = logging.getLogger()
        assert len(root_logger.handlers) == 1
        assert structlog.is_configured()

    def test_repeated_calls_replace_handler(self) -> None:
        configure_logging()
        configure_logging()
        assert len(logging.getLogger().handlers) == 1

    def test_configure_logging_custom_level(self) -> None:
        configure_logging(level=logging.DEBUG)
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_logging_level_from_env(self) -> None:
        """Test log level from CALCEXPR_LOG_LEVEL env var."""
        with patch.dict(os.environ, {"CALCEXPR_LOG_LEVEL": "ERROR"}):
            configure_logging()
            assert logging.getLogger().level == logging.ERROR

    def test_unknown_env_level_falls_back_to_warning(self) -> None:
        with patch.dict(os.environ, {"CALCEXPR_LOG_LEVEL": "chatty"}):
            configure_logging()
            assert logging.getLogger().level == logging.WARNING

    def test_json_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """force_json emits one JSON object per event on stderr."""
        configure_logging(force_json=True, level=logging.INFO)
        get_logger("calcexpr.test").info("expression_checked", ok=True)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "expression_checked"
        assert event["ok"] is True
        assert event["level"] == "info"

    def test_json_via_env(self, capsys: pytest.CaptureFixture[str]) -> None:
        with patch.dict(os.environ, {"CALCEXPR_LOG_FORMAT": "json"}):
            configure_logging(level=logging.INFO)
        get_logger("calcexpr.test").info("env_json")
        assert json.loads(capsys.readouterr().err.strip().splitlines()[-1])["event"] == "env_json"


class TestContext:
    """Tests for contextvars bindings."""

    def test_bound_context_is_included(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(force_json=True, level=logging.INFO)
        bind_context(formula="a + 1")
        try:
            get_logger("calcexpr.test").info("with_context")
        finally:
            clear_context()
        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert event["formula"] == "a + 1"

    def test_clear_context(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging(force_json=True, level=logging.INFO)
        bind_context(formula="a + 1")
        clear_context()
        get_logger("calcexpr.test").info("no_context")
        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert "formula" not in event


class TestLibraryEvents:
    """Tests for debug events emitted by the engine."""

    def test_cache_events_are_logged_at_debug(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from calcexpr.expressions.cache import CompiledExpressionCache

        configure_logging(force_json=True, level=logging.DEBUG)
        cache = CompiledExpressionCache()
        tree = cache.compile("logged + 1")

        events = [
            json.loads(line)
            for line in capsys.readouterr().err.strip().splitlines()
            if line.startswith("{")
        ]
        assert any(
            e["event"] == "expression_cached" and e["expression"] == "logged + 1"
            for e in events
        )
        del tree
