"""
Centralized logging configuration for the fasting core.

This module provides standardized logging configuration using structlog
for all components. All logging throughout the package should go through
this configuration to keep formatting and structured fields consistent.
"""
import logging
import sys
from typing import Any, Optional, TextIO

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None,
    stream: Optional[TextIO] = None
) -> None:
    """
    Configure structlog for the fasting core.

    Log lines go to stderr by default, since stdout carries the live status
    lines of the stdout publisher. Values bound with
    ``structlog.contextvars`` (the runtime binds the action being reduced)
    are merged into every event.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include a UTC timestamp in log output
        include_caller: Include caller information (filename, function, line number)
        extra_processors: Additional structlog processors to include
        stream: Output stream, defaults to sys.stderr
    """
    log_level = getattr(logging, level.upper())
    stream = stream or sys.stderr

    # Replaces handlers left by an earlier build_runtime()
    logging.basicConfig(
        level=log_level,
        stream=stream,
        format="%(message)s",
        force=True
    )

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.FUNC_NAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer(sort_keys=True))
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_state_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger for state machine transitions.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound with the state machine subsystem
    """
    return get_logger(name).bind(
        subsystem="state_machine",
        audit_trail=True
    )


def get_live_logger(name: str) -> FilteringBoundLogger:
    """Get a logger for the live status surface."""
    return get_logger(name).bind(subsystem="live_surface")


def log_state_transition(
    logger: FilteringBoundLogger,
    record_id: Optional[str],
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a fasting phase transition with standardized format.

    Args:
        logger: Structlog logger instance
        record_id: ID of the fasting record involved, if any
        from_state: Current phase
        to_state: Target phase
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        record_id=record_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("state_transition")
