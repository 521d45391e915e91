"""
Structured logging configuration using structlog.
Configures the service's own logs and builds the sink that receives request records.
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

from logger_json.core.config import Settings, get_settings


def add_app_context(
    logger: Any, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add application-level context to every operational log entry."""
    settings = get_settings()
    event_dict.setdefault("app", settings.APP_NAME)
    event_dict.setdefault("environment", settings.APP_ENV)
    return event_dict


def render_message(logger: Any, method_name: str, event_dict: EventDict) -> str:
    """Hand the already-serialized record text to the output unchanged."""
    return event_dict["event"]


def configure_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure structlog with JSON formatting by default.
    Falls back to pretty console output when LOG_FORMAT is not "json".
    """
    settings = settings or get_settings()
    log_level = settings.log_level_number

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]

    if settings.is_json_logging:
        renderer: list[Processor] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        renderer = [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=[*shared_processors, *renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=settings.is_json_logging,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    # Request records replace the server's own access log
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def build_request_sink(
    level: int, logger: Optional[Any] = None
) -> structlog.types.FilteringBoundLogger:
    """
    Build the logger that request records are written to.

    Args:
        level: Threshold below which records are suppressed.
        logger: Underlying output; defaults to a PrintLogger on stdout.

    Returns:
        A filtering bound logger whose output is exactly the record text.
    """
    return structlog.wrap_logger(
        logger if logger is not None else structlog.PrintLogger(sys.stdout),
        processors=[render_message],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
    )
