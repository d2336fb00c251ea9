"""
Logging configuration for Carpool Core.

Provides centralized structured logging setup with JSON output for production
and human-readable output for development. Supports correlation IDs so that
an authority check and the removal it gates can be traced together.
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import structlog
from structlog.types import EventDict


# Context variable for correlation ID
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add correlation ID to log events if present in context.

    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary to modify

    Returns:
        Modified event dictionary with correlation_id if available
    """
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def set_correlation_id(correlation_id: Optional[str] = None) -> str:
    """
    Set correlation ID for the current context.

    Args:
        correlation_id: Optional correlation ID. If None, generates a new UUID.

    Returns:
        The correlation ID that was set
    """
    if correlation_id is None:
        correlation_id = str(uuid.uuid4())
    correlation_id_var.set(correlation_id)
    return correlation_id


def clear_correlation_id() -> None:
    """Clear correlation ID from the current context."""
    correlation_id_var.set(None)


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context, or None if not set."""
    return correlation_id_var.get()


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = True,
) -> None:
    """
    Configure structured logging for Carpool Core.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs only to stderr.
        json_format: If True, use JSON format. If False, use human-readable format.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(stderr_handler)

    processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
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
    Get a structured logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Structured logger instance.
    """
    if name.startswith("carpool"):
        return structlog.get_logger(name)
    return structlog.get_logger(f"carpool.{name}")


# Convenience functions for common logging patterns

def log_removal_decision(
    logger: structlog.stdlib.BoundLogger,
    actor_email: str,
    carpool_id: str,
    target_participant_id: str,
    allowed: bool,
    reason: Optional[str] = None,
    restrictions: Sequence[str] = (),
    **kwargs: Any,
) -> None:
    """
    Log a driver removal authority decision.

    Args:
        logger: Logger instance
        actor_email: Identity of the user asking to remove
        carpool_id: Carpool the removal applies to
        target_participant_id: Participant that would be removed
        allowed: Whether removal was granted
        reason: Denial reason, if denied
        restrictions: Advisory restrictions attached to a grant
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "removal_authority_decision",
        "actor_email": actor_email,
        "carpool_id": carpool_id,
        "target_participant_id": target_participant_id,
        "decision": "allow" if allowed else "deny",
    }

    if reason is not None:
        log_data["reason"] = reason
    if restrictions:
        log_data["restrictions"] = list(restrictions)

    log_data.update(kwargs)

    if allowed:
        logger.info("removal_authority_decision", **log_data)
    else:
        logger.warning("removal_authority_decision", **log_data)


def log_removal_execution(
    logger: structlog.stdlib.BoundLogger,
    carpool_id: str,
    target_participant_id: str,
    removed_by: str,
    disbanded: bool,
    notification_count: int,
    remaining_participants: int,
    **kwargs: Any,
) -> None:
    """
    Log the outcome of an executed driver removal.

    Args:
        logger: Logger instance
        carpool_id: Carpool the driver was removed from
        target_participant_id: Removed participant
        removed_by: Identity of the user who performed the removal
        disbanded: Whether the carpool was disbanded
        notification_count: Number of notifications produced
        remaining_participants: Participants left after the removal
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "driver_removal_executed",
        "carpool_id": carpool_id,
        "target_participant_id": target_participant_id,
        "removed_by": removed_by,
        "disbanded": disbanded,
        "notification_count": notification_count,
        "remaining_participants": remaining_participants,
    }

    log_data.update(kwargs)

    if disbanded:
        logger.warning("driver_removal_executed", **log_data)
    else:
        logger.info("driver_removal_executed", **log_data)
