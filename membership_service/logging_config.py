"""Structured logging for the membership service.

Every record carries the app name, level, logger name and an ISO UTC
timestamp, plus whatever request context the middleware bound (request_id,
actor_id, subscription_id, plan_id, user_id). Email addresses in the
recipient fields are masked before rendering.
"""

import logging
import os
import sys
from typing import Any

import structlog
from structlog.typing import EventDict, Processor

APP_NAME = "membership-service"

# Event fields that hold a recipient address
EMAIL_FIELDS = ("to", "email", "admin_email")


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict["app"] = APP_NAME
    return event_dict


def mask_email(address: str) -> str:
    """Keep the first character of the local part and the domain: a***@example.com."""
    local, sep, domain = address.partition("@")
    if not sep or not local:
        return address
    return f"{local[0]}***@{domain}"


def mask_email_addresses(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask recipient addresses so logs carry no full email address."""
    for field in EMAIL_FIELDS:
        value = event_dict.get(field)
        if isinstance(value, str):
            event_dict[field] = mask_email(value)
    return event_dict


def build_processors(json_format: bool, include_timestamp: bool) -> list[Processor]:
    processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        add_app_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        mask_email_addresses,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback)
        )
    return processors


def configure_logging(
    log_level: str = "INFO",
    json_format: bool = True,
    include_timestamp: bool = True,
) -> None:
    """Route structlog through the stdlib root logger on stdout.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL; unknown names fall back to INFO
        json_format: JSON lines when True, coloured console output otherwise
        include_timestamp: Add an ISO8601 UTC ``timestamp`` field
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)

    structlog.configure(
        processors=build_processors(json_format, include_timestamp),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging_from_env() -> None:
    """Configure logging from LOG_LEVEL (default INFO) and LOG_FORMAT (json or console)."""
    configure_logging(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        json_format=os.getenv("LOG_FORMAT", "json").lower() == "json",
    )


def get_logger(name: str = __name__) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind values to every later log line of the current request.

    ``None`` values are skipped.

    Example:
        bind_context(request_id="abc123", subscription_id="sub_5d1e0c3a9b7f4e21")
    """
    values = {key: value for key, value in kwargs.items() if value is not None}
    if values:
        structlog.contextvars.bind_contextvars(**values)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
