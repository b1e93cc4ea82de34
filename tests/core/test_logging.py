# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import io
import json
import logging

import pytest
import structlog


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from assetforge.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    def test_logger_outputs_structured(self, capsys: pytest.CaptureFixture[str]) -> None:
        """JSON mode emits one JSON object per line."""
        from assetforge.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("test message", key="value")

        log_line = capsys.readouterr().out.strip().split("\n")[-1]
        data = json.loads(log_line)
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_logger_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        from assetforge.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").info("test message", key="value")

        assert "test message" in capsys.readouterr().out

    def test_explicit_stream(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Logs go to the given stream, not stdout."""
        from assetforge.core.logging import configure_logging, get_logger

        stream = io.StringIO()
        configure_logging(json_output=True, stream=stream)
        get_logger("test").warning("to stream")

        assert "to stream" in stream.getvalue()
        assert "to stream" not in capsys.readouterr().out

    def test_stdlib_logging_uses_same_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Stdlib loggers are routed through the structlog chain."""
        from assetforge.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("some.library").warning("stdlib message")

        data = json.loads(capsys.readouterr().out.strip().split("\n")[-1])
        assert data["event"] == "stdlib message"

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        from assetforge.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="WARNING")
        get_logger("test").info("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_noisy_loggers_quieted(self) -> None:
        from assetforge.core.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger("dynaconf").level == logging.WARNING


class TestNodeContext:
    def test_binds_node_and_phase(self) -> None:
        from assetforge.core.logging import bind_node_context

        with bind_node_context("characters", "run"):
            bound = structlog.contextvars.get_contextvars()

        assert bound["node_id"] == "characters"
        assert bound["phase"] == "run"
        assert "node_id" not in structlog.contextvars.get_contextvars()

    def test_nested_contexts_restore(self) -> None:
        from assetforge.core.logging import bind_node_context

        with bind_node_context("outer", "setup"):
            with bind_node_context("inner", "run"):
                pass
            restored = structlog.contextvars.get_contextvars()

        assert restored["node_id"] == "outer"
        assert restored["phase"] == "setup"
