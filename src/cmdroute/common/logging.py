"""Centralized logging configuration using structlog.

cmdroute never configures logging on import. Its loggers are structlog
wrappers around stdlib loggers under ``cmdroute``, which carries only a
``NullHandler``, so compilation, matching and validation stay silent until
the host calls ``setup_logging`` or attaches handlers of its own.
"""

import logging
import sys
from typing import TextIO

import structlog
from structlog.typing import Processor

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# No output before the host adds handlers, not even logging.lastResort
logging.getLogger("cmdroute").addHandler(logging.NullHandler())


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
    log_file: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure structured logging for cmdroute and its host application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: If True, output JSON formatted logs
        log_file: Optional file path to write logs to
        stream: Stream for console output. Defaults to stderr so that log
            lines never mix with a command's own stdout.

    Raises:
        ValueError: If level is not a known logging level
    """
    if level.upper() not in _LEVELS:
        raise ValueError(f"Unknown log level '{level}', expected one of {_LEVELS}")
    log_level = getattr(logging, level.upper())

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(log_level)

    console_handler = logging.StreamHandler(stream or sys.stderr)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger writing through the stdlib logger ``name``.

    Events never go to stdout directly: they reach whatever handlers the
    host attached, and nothing at all before it configures logging.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structlog logger wrapping ``logging.getLogger(name)``
    """
    return structlog.wrap_logger(  # type: ignore[no-any-return]
        logging.getLogger(name), wrapper_class=structlog.stdlib.BoundLogger
    )
