"""
Tests for logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest
import structlog

from bitcoin_rest.models.config import RestClientConfig
from bitcoin_rest.utils.logging import HTTP_LOGGERS, _renderer, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root logger and structlog back the way pytest had them."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    http_levels = {name: logging.getLogger(name).level for name in HTTP_LOGGERS}
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    for name, http_level in http_levels.items():
        logging.getLogger(name).setLevel(http_level)
    structlog.reset_defaults()


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_level_applied(self):
        """Test the configured level reaches the root logger."""
        setup_logging(RestClientConfig(log_level="ERROR"))
        assert logging.getLogger().level == logging.ERROR

    def test_repeated_setup_does_not_stack_handlers(self):
        """Test calling setup twice leaves one stderr handler."""
        config = RestClientConfig(log_level="INFO")
        setup_logging(config)
        setup_logging(config)

        assert len(logging.getLogger().handlers) == 1

    def test_log_file(self, tmp_path):
        """Test a log file in a missing directory gets a rotating handler."""
        log_file = tmp_path / "logs" / "rest.log"
        setup_logging(RestClientConfig(log_file=str(log_file), log_max_size_mb=2, log_backup_count=3))

        rotating = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert log_file.parent.is_dir()
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 2 * 1024 * 1024
        assert rotating[0].backupCount == 3

    @pytest.mark.parametrize("level,expected", [
        ("INFO", logging.WARNING),
        ("DEBUG", logging.DEBUG),
    ])
    def test_http_loggers_quiet_unless_debug(self, level, expected):
        """Test connection pool logging only shows up at DEBUG."""
        setup_logging(RestClientConfig(log_level=level))
        assert logging.getLogger("urllib3").level == expected

    def test_renderer_choice(self):
        """Test log_format picks the JSON or console renderer."""
        assert isinstance(_renderer(RestClientConfig(log_format="json")),
                          structlog.processors.JSONRenderer)
        assert isinstance(_renderer(RestClientConfig(log_format="text")),
                          structlog.dev.ConsoleRenderer)
