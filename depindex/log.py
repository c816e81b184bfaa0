"""
Structured logging setup.

Every structural change to the index (removals, additions, graph updates,
compactions) and every absorbed read failure is reported as a structlog
event. Logging is observational only.
"""

import logging
import os
import sys
from typing import Optional

import structlog
from structlog.contextvars import merge_contextvars

LOG_LEVEL_ENV = "CMINDEX_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"


def get_log_level() -> str:
    """Log level from the environment, or the default."""
    return os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()


def configure_logging(level: Optional[str] = None, fmt: str = "console") -> None:
    """
    Configure structlog on top of stdlib logging.
    
    Args:
        level: Logging level name (DEBUG, INFO, ...). None reads the environment.
        fmt: "json" for machine-readable lines, "console" for humans.
    """
    if level is None:
        level = get_log_level()
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )
    
    shared_processors = [
        merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer(sort_keys=True)
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    
    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def get_logger(name: Optional[str] = None):
    """
    Get a structured logger.
    
    Example:
        logger = get_logger(__name__)
        logger.info("digest_removed", digest="9f86d0", path="a.cmi")
    """
    return structlog.get_logger(name)
