"""Logging configuration for the allocation service.

Stdlib logging carries the records, structlog builds them. Production and
staging render one JSON document per line, everything else gets the
structlog console renderer.
"""

import logging
import sys
from typing import Any

import orjson
import structlog

from stockroom.config import Config, get_config

LEVELS_BY_ENVIRONMENT = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}


def get_log_level(config: Config) -> str:
    """Get log level based on environment."""
    if config.LOG_LEVEL:
        return config.LOG_LEVEL.upper()
    return LEVELS_BY_ENVIRONMENT.get(config.ENVIRONMENT.lower(), "INFO")


def _orjson_dumps(obj: Any, **kwargs: Any) -> str:
    return orjson.dumps(obj, **kwargs).decode("utf-8")


def setup_stdlib_logging(config: Config) -> None:
    log_level = get_log_level(config)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(console_handler)

    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def setup_structlog(config: Config) -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if config.ENVIRONMENT.lower() in ["production", "staging"]:
        processors.append(structlog.processors.JSONRenderer(serializer=_orjson_dumps))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(config: Config | None = None) -> None:
    """Configure all logging for the application."""
    config = config or get_config()
    setup_stdlib_logging(config)
    setup_structlog(config)


def bind_context(**kwargs: Any) -> None:
    """Add context variables that will be included in all subsequent log messages."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
