"""
structlog setup shared by the library, the examples and the tests.
"""

import logging
import sys

import structlog


def configure_logging(log_level: str = None, log_format: str = None) -> None:
    """Configure structlog on top of the standard library logger.

    Defaults come from the application settings.
    """
    if log_level is None or log_format is None:
        from ..config import settings
        log_level = log_level or settings.log_level
        log_format = log_format or settings.log_format

    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{log_level}'")
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
