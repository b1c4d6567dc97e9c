"""Structured logging configuration using structlog.

Provides JSON logging for production and console logging for development.
Resolver parameters and buffers can be arbitrarily large, so long values are
truncated and sensitive keys are redacted before rendering.
"""

import re
import sys
from collections.abc import MutableMapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

# Sensitive key names (O(1) lookup)
SENSITIVE_KEYS: frozenset[str] = frozenset({
    "password",
    "passwd",
    "secret",
    "token",
    "api_key",
    "apikey",
    "authorization",
    "credential",
    "credentials",
    "access_token",
    "refresh_token",
    "private_key",
})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

MAX_VALUE_LENGTH = 512


class PIIRedactor:
    """Processor that redacts sensitive data from log events.

    Sensitive key names are replaced outright; string values are scrubbed
    for e-mail addresses.
    """

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        return cast(EventDict, self._redact(event_dict))

    def _redact(self, value: Any) -> Any:
        if isinstance(value, MutableMapping):
            return {
                key: "[REDACTED]"
                if isinstance(key, str) and key.lower() in SENSITIVE_KEYS
                else self._redact(item)
                for key, item in value.items()
            }
        if isinstance(value, list | tuple):
            return [self._redact(item) for item in value]
        if isinstance(value, str):
            return EMAIL_PATTERN.sub("[EMAIL]", value)
        return value


class ValueTruncator:
    """Processor that shortens oversized field values.

    Buffers and parameter trees are logged as their repr, cut at
    ``max_length`` characters.
    """

    def __init__(self, max_length: int = MAX_VALUE_LENGTH) -> None:
        self.max_length = max_length

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        for key, value in event_dict.items():
            if key == "event" or isinstance(value, int | float | bool) or value is None:
                continue
            text = value if isinstance(value, str) else repr(value)
            if len(text) > self.max_length:
                event_dict[key] = text[: self.max_length] + "...[truncated]"
        return event_dict


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact_pii: bool = True,
    max_value_length: int = MAX_VALUE_LENGTH,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact_pii: Whether to redact sensitive values from logs
        max_value_length: Longest rendered field value before truncation
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if redact_pii:
        processors.append(PIIRedactor())
    processors.append(ValueTruncator(max_value_length))

    if format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    level_map = {
        "DEBUG": 10,
        "INFO": 20,
        "WARNING": 30,
        "ERROR": 40,
        "CRITICAL": 50,
    }
    level_num = level_map.get(level.upper(), 20)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_num),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name.

    Args:
        name: Logger name (typically __name__ of the module)

    Returns:
        A bound structlog logger
    """
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
