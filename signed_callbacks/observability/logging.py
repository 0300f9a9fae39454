"""
Structured Logging with Structlog.

Provides JSON-formatted logs with request IDs and callback context.
Secret fields such as keys and signatures are dropped from every event.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import EventDict, Processor

from signed_callbacks.config import settings


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add application-level context to all log entries."""
    event_dict["service"] = settings.service_name
    event_dict["version"] = settings.api_version
    return event_dict


SECRET_FIELDS = frozenset({"app_key", "previous_keys", "signature", "x_api_key", "admin_api_key"})


def drop_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Remove secret-bearing fields, including ones bound through log_context."""
    for key in SECRET_FIELDS.intersection(event_dict):
        del event_dict[key]
    return event_dict


def setup_logging(stream: TextIO = sys.stdout) -> None:
    """
    Configure structured logging with structlog.

    Logs are formatted as JSON for machine parsing with the following structure:
    {
        "event": "callback_signature_rejected",
        "level": "warning",
        "timestamp": "2025-01-08T12:00:00.123456Z",
        "logger": "signed_callbacks.api.dependencies",
        "service": "signed-callbacks-api",
        "version": "0.1.0",
        "request_id": "req-123",
        ...additional context
    }

    The CLI passes stderr so its stdout carries only the generated URL.
    """
    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, settings.log_level.upper()),
    )

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_app_context,
        drop_secrets,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if settings.log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.info("callback_url_generated", provider="google_play", signed=True)
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]


# Context manager for adding request context
class log_context:
    """
    Context manager for adding structured logging context.

    Usage:
        with log_context(request_id="req-123", provider="app_store"):
            logger.info("callback_received")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs

    def __enter__(self) -> None:
        """Enter context - bind context variables."""
        structlog.contextvars.bind_contextvars(**self.context)

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Exit context - clear context variables."""
        structlog.contextvars.unbind_contextvars(*self.context.keys())
