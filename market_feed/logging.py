"""
Structured logging setup.

All modules log through structlog with snake_case event names, e.g.:

    logger = structlog.get_logger(__name__)
    logger.info("feed_connected", target=url)

setup_logging() wires structlog to the standard library so that the level
configured here applies to every module.
"""

import logging
import sys

import structlog

from market_feed.config.models import LogFormat, LogLevel


def setup_logging(
    level: LogLevel | str = LogLevel.INFO,
    fmt: LogFormat | str = LogFormat.JSON,
) -> None:
    """
    Configure structlog and stdlib logging.

    Args:
        level: Minimum log level.
        fmt: "json" for machine-readable output, "text" for console output.
    """
    level = LogLevel(level.upper() if isinstance(level, str) else level)
    fmt = LogFormat(fmt)

    renderer = (
        structlog.processors.JSONRenderer()
        if fmt == LogFormat.JSON
        else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.value),
    )

    # The websockets library logs every frame at DEBUG
    logging.getLogger("websockets").setLevel(logging.WARNING)
