"""Service layer logging utilities.

Provides structured logging functions for service operations so saves,
deletes and reorders share one log format.

Usage:
    from potluck.services.logging_utils import get_service_logger, log_operation

    logger = get_service_logger(__name__)

    log_operation(
        logger,
        operation="save_registration",
        outcome="success",
        registration_id=12,
        slot_number=3,
    )
"""

import logging
from typing import Any


def get_service_logger(name: str) -> logging.Logger:
    """
    Get a logger configured for service operations.

    Args:
        name: Logger name (typically __name__ of the calling module)

    Returns:
        Logger named 'potluck.services.<module>'

    Example:
        >>> get_service_logger("potluck.services.registration_service").name
        'potluck.services.registration_service'
    """
    if "." in name:
        name = name.split(".")[-1]
    return logging.getLogger(f"potluck.services.{name}")


def log_operation(
    logger: logging.Logger,
    operation: str,
    outcome: str,
    level: int = logging.INFO,
    **context: Any,
) -> None:
    """
    Log a service operation with structured context.

    The message is "<operation>: <outcome>"; the context fields are attached
    to the record via ``extra``.

    Args:
        logger: Logger instance to use
        operation: Operation name (e.g., "save_registration", "move_category_up")
        outcome: Outcome description (e.g., "success", "validation_failed", "error")
        level: Log level (default: INFO)
        **context: Additional context fields (entity IDs, error details, etc.)
    """
    extra = {
        "operation": operation,
        "outcome": outcome,
        **context,
    }
    logger.log(level, f"{operation}: {outcome}", extra=extra)
