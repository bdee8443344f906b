"""Unit tests for the logging configuration module."""

import logging
from unittest.mock import MagicMock, patch

import pytest
import structlog

from trampoline.logging import get_logger, setup_logging


@pytest.fixture(autouse=True)
def _reset_logging():
    """Reset root logger and structlog state around each test."""
    original_handlers = logging.root.handlers[:]
    original_level = logging.root.level
    logging.root.handlers.clear()
    yield
    logging.root.handlers.clear()
    logging.root.handlers.extend(original_handlers)
    logging.root.setLevel(original_level)
    structlog.reset_defaults()


def _mock_settings(level: str = "INFO", development: bool = False) -> MagicMock:
    settings = MagicMock()
    settings.log_level = level
    settings.is_development = development
    return settings


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_basic_config_uses_configured_level(self):
        """Test that setup_logging passes the configured level to basicConfig."""
        with patch("trampoline.logging.get_settings", return_value=_mock_settings("DEBUG")):
            with patch("trampoline.logging.logging.basicConfig") as mock_basic:
                setup_logging()

        assert mock_basic.call_args.kwargs["level"] == logging.DEBUG

    def test_invalid_level_defaults_to_info(self):
        """Test setup_logging falls back to INFO for an unknown level."""
        with patch("trampoline.logging.get_settings", return_value=_mock_settings("NONEXISTENT")):
            with patch("trampoline.logging.logging.basicConfig") as mock_basic:
                setup_logging()

        assert mock_basic.call_args.kwargs["level"] == logging.INFO

    def test_reduces_third_party_noise(self):
        """Test that httpx loggers are raised to WARNING."""
        with patch("trampoline.logging.get_settings", return_value=_mock_settings("DEBUG")):
            setup_logging()

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    @pytest.mark.parametrize(
        ("development", "renderer"),
        [
            (True, structlog.dev.ConsoleRenderer),
            (False, structlog.processors.JSONRenderer),
        ],
    )
    def test_renderer_depends_on_environment(self, development, renderer):
        """Test console output in development and JSON otherwise."""
        with patch(
            "trampoline.logging.get_settings",
            return_value=_mock_settings(development=development),
        ):
            with patch("trampoline.logging.structlog.configure") as mock_configure:
                setup_logging()

        processors = mock_configure.call_args.kwargs["processors"]
        assert isinstance(processors[-1], renderer)


class TestGetLogger:
    """Tests for get_logger."""

    def test_returns_usable_logger(self):
        """Test that get_logger returns an object with the logging methods."""
        log = get_logger("trampoline.test")
        for method in ("debug", "info", "warning", "error"):
            assert callable(getattr(log, method))
