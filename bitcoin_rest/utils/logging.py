"""Logging for the REST client and CLI.

Everything goes through structlog on top of the stdlib root logger, and
always to stderr: the CLI prints its results as JSON on stdout.
"""

import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import structlog
from structlog.stdlib import LoggerFactory

from bitcoin_rest.models.config import RestClientConfig

# Chatty per-connection loggers of the HTTP stack
HTTP_LOGGERS = ("urllib3", "requests")


def _renderer(config: RestClientConfig):
    if config.log_format.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def _file_handler(config: RestClientConfig, level: int) -> RotatingFileHandler:
    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        log_path,
        maxBytes=config.log_max_size_mb * 1024 * 1024,
        backupCount=config.log_backup_count,
    )
    handler.setLevel(level)
    return handler


def setup_logging(config: RestClientConfig) -> None:
    """
    Configure structlog and the stdlib root logger from ``config``.

    Safe to call more than once: earlier root handlers are replaced, so a
    second CLI invocation in the same process does not log twice.
    """
    level = getattr(logging, config.log_level.upper())

    handlers = [logging.StreamHandler(sys.stderr)]
    if config.log_file:
        handlers.append(_file_handler(config, level))
    logging.basicConfig(level=level, format="%(message)s", handlers=handlers, force=True)

    # Connection pool chatter only at DEBUG
    http_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(config),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
