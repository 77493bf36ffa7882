"""
Logging Configuration

structlog over the standard library. Every entry carries the service name and
environment; sweep-scoped values (sweep id, dealer) ride along via contextvars.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from config.settings import settings

SERVICE_NAME = "vehicle_registry_sync"

# Keys whose values must never reach a log sink
_SECRET_KEYS = frozenset({"api_key", "x-api-key", "registry_api_key", "authorization"})


def add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Stamp service and environment on each entry."""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict["environment"] = settings.environment
    return event_dict


def redact_secrets(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask credential values logged by accident."""
    for key in event_dict.keys() & _SECRET_KEYS:
        event_dict[key] = "***"
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
        redact_secrets,
    ]


def setup_logging(level: Optional[str] = None) -> structlog.BoundLogger:
    """
    Configure structured logging for API, DAG and CLI processes.

    Args:
        level: Override settings.log_level

    Returns:
        Configured structlog logger instance
    """
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, (level or settings.log_level).upper()),
    )

    processors = _shared_processors()
    if settings.log_format == "json":
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    return structlog.get_logger(SERVICE_NAME)


def get_logger(name: Optional[str] = None) -> structlog.BoundLogger:
    """Logger for a module (pass __name__)."""
    return structlog.get_logger(name) if name else structlog.get_logger()


def bind_sweep_context(**values: Any) -> None:
    """
    Bind sweep-scoped values (sweep id, tenant) to every log entry in this context.

    Cleared with clear_sweep_context() when the sweep finishes.
    """
    structlog.contextvars.bind_contextvars(**values)


def clear_sweep_context() -> None:
    """Drop values bound by bind_sweep_context()."""
    structlog.contextvars.clear_contextvars()
