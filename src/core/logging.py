"""
Sarthi Guidance Service - Structured Logging Module

src.main calls configure_logging() from settings (log_level, log_json) when
it is imported, before the app is built. Every module then takes its logger
from get_logger(__name__) and logs snake_case events such as
"verses_retrieved" or "guidance_generation_failed" with keyword fields.

The request middleware in src.main binds a request_id for each HTTP request,
so everything logged while retrieving verses or composing guidance for that
request carries the same id.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import EventDict

SERVICE_NAME = "sarthi-guidance-service"

_configured: bool = False


def add_service_info(
    logger: logging.Logger,  # noqa: ARG001 - Required by structlog interface
    method_name: str,  # noqa: ARG001 - Required by structlog interface
    event_dict: EventDict,
) -> EventDict:
    """Stamp each entry with service=sarthi-guidance-service."""
    event_dict["service"] = SERVICE_NAME
    return event_dict


def configure_logging(
    log_level: str = "INFO",
    json_output: bool = True,
) -> None:
    """Route structlog output to stdout for the guidance service.

    JSON lines suit container log collectors; SARTHI_LOG_JSON=false switches
    to the colored console renderer for local runs. Only the first call takes
    effect, so importing src.main repeatedly in tests does not stack
    handlers. tests/unit/test_core.py calls reset_logging() to start over.

    Args:
        log_level: Level name from settings; unknown names fall back to INFO
        json_output: JSON renderer when True, console renderer otherwise
    """
    global _configured

    if _configured:
        return

    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=level,
    )

    renderer: Any
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            add_service_info,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _configured = True


def get_logger(name: str) -> Any:
    return structlog.get_logger(name)


def bind_request_context(**values: Any) -> None:
    """Replace the per-request context, e.g. request_id from X-Request-ID."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    """Called by the middleware once the response is sent."""
    structlog.contextvars.clear_contextvars()


def reset_logging() -> None:
    """Allow configure_logging() to run again; used by the core tests."""
    global _configured
    _configured = False
    structlog.reset_defaults()
