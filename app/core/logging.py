"""
Logging configuration for the Profile Share backend.
Provides structured logging for identity, session, link and storage operations.
"""

import logging
import sys
from typing import Any, Dict
import structlog
from structlog.stdlib import LoggerFactory

from app.core.config import settings


def setup_logging() -> None:
    """
    Configure structured logging for the application.
    Sets up different log formats for development and production environments.
    """

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            _get_processor(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.LOG_LEVEL.upper()),
    )

    # Set specific logger levels
    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("motor").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def _get_processor():
    """
    Get the appropriate processor based on environment.

    Returns:
        Processor function for structlog
    """
    if settings.ENVIRONMENT == "production":
        return structlog.processors.JSONRenderer()
    else:
        return structlog.dev.ConsoleRenderer(colors=True)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog.stdlib.BoundLogger: Configured logger instance
    """
    return structlog.get_logger(name)


# Specialized logging functions for profile operations

def log_identity_operation(
    operation: str,
    identity_id: str = None,
    username: str = None,
    **kwargs
) -> None:
    """
    Log identity management operations.

    Args:
        operation: Operation type (register, login, edit_profile, delete, etc.)
        identity_id: User ID
        username: Username
        **kwargs: Additional context
    """
    logger = get_logger("identity.operation")
    logger.info(
        "Identity operation",
        operation=operation,
        identity_id=identity_id,
        username=username,
        **kwargs
    )


def log_session_operation(
    operation: str,
    user_id: str = None,
    status: str = "success",
    **kwargs
) -> None:
    """
    Log session operations.

    Args:
        operation: Operation type (issue, refresh, logout)
        user_id: User ID
        status: Operation status
        **kwargs: Additional context
    """
    logger = get_logger("session.operation")
    logger.info(
        "Session operation",
        operation=operation,
        user_id=user_id,
        status=status,
        **kwargs
    )


def log_link_operation(
    operation: str,
    user_id: str,
    link_type: str = None,
    link_id: str = None,
    **kwargs
) -> None:
    """Log profile link operations (add, delete)."""
    logger = get_logger("link.operation")
    logger.info(
        "Link operation",
        operation=operation,
        user_id=user_id,
        link_type=link_type,
        link_id=link_id,
        **kwargs
    )


def log_storage_operation(
    operation: str,
    key: str,
    user_id: str = None,
    **kwargs
) -> None:
    """
    Log object storage operations.

    Args:
        operation: Operation type (presign_upload, delete)
        key: Object key
        user_id: User ID
        **kwargs: Additional context
    """
    logger = get_logger("storage.operation")
    logger.info(
        "Storage operation",
        operation=operation,
        key=key,
        user_id=user_id,
        **kwargs
    )


def log_error(error: Exception, context: Dict[str, Any] = None) -> None:
    """
    Log an error with context.

    Args:
        error: Exception instance
        context: Additional context information
    """
    logger = get_logger("error")
    logger.error(
        "An error occurred",
        error=str(error),
        error_type=type(error).__name__,
        context=context or {},
        exc_info=True
    )
