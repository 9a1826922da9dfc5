"""
Structured logging configuration using structlog.
"""

import logging
import sys
import uuid
from functools import lru_cache

import structlog

from ocrcast.config import get_settings


def setup_logging(log_level: str = None, log_format: str = None, stream=None):
    """
    Configure structured logging.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override format ('json' or 'console')
        stream: Output stream (stdout unless given; the CLI logs to stderr
            so that stdout stays free for image and text output)
    """
    settings = get_settings()
    level = log_level or settings.log_level
    fmt = log_format or settings.log_format

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=getattr(logging, level),
        force=True
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if fmt == "json":
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False)
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(colors=stream is None)
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


@lru_cache()
def get_logger(name: str = None):
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_request_context(request_id: str = None, **kwargs) -> str:
    """Bind context variables for the current request."""
    request_id = request_id or uuid.uuid4().hex[:8]
    structlog.contextvars.bind_contextvars(request_id=request_id, **kwargs)
    return request_id


def clear_request_context():
    structlog.contextvars.clear_contextvars()
