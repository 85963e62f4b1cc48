"""
Unit tests for logging setup.
"""

import logging

import pytest

import utils.logging_utils as logging_utils
from core.config import LOG_LEVEL


@pytest.fixture
def fresh_logging(monkeypatch):
    """Let setup_logging run again and restore the root logger afterwards."""
    monkeypatch.setattr(logging_utils, "_configured", False)
    root = logging.getLogger()
    saved_level = root.level
    saved_handlers = list(root.handlers)
    yield root
    root.handlers = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    """Test setup_logging."""

    def test_default_uses_configured_level(self, fresh_logging):
        logging_utils.setup_logging()

        assert fresh_logging.level == getattr(logging, LOG_LEVEL, logging.INFO)

    def test_info_messages_pass_at_info_level(self, fresh_logging, monkeypatch):
        monkeypatch.setattr(logging_utils, "LOG_LEVEL", "INFO")

        logging_utils.setup_logging()

        assert fresh_logging.level == logging.INFO
        assert logging.getLogger("services.booking_service").isEnabledFor(logging.INFO)

    def test_not_verbose_keeps_warnings_only(self, fresh_logging):
        logging_utils.setup_logging(verbose=False)

        assert fresh_logging.level == logging.WARNING

    def test_library_loggers_quiet_unless_debug(self, fresh_logging, monkeypatch):
        monkeypatch.setattr(logging_utils, "LOG_LEVEL", "INFO")
        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        saved = sqlalchemy_logger.level

        try:
            logging_utils.setup_logging()
            assert sqlalchemy_logger.level == logging.ERROR
        finally:
            sqlalchemy_logger.setLevel(saved)

    def test_second_call_is_noop(self, fresh_logging):
        logging_utils.setup_logging(verbose=False)
        logging_utils.setup_logging(verbose=True)

        assert fresh_logging.level == logging.WARNING
