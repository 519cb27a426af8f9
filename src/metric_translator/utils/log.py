import logging
import os
from typing import Optional

import structlog

LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def configure_logging(level: Optional[str] = None) -> None:
    """Set up structlog over stdlib logging; unknown level names fall back to INFO"""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level_no = LOG_LEVELS.get(level_name, logging.INFO)
    logging.basicConfig(level=level_no, format="%(asctime)s - %(levelname)s - %(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
    )
    if level_name not in LOG_LEVELS:
        structlog.get_logger(__name__).warning("Unknown log level, using INFO", level=level_name)
