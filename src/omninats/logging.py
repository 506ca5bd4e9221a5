"""Logging configuration for OmniNATS using Loguru."""

import os
import sys
from typing import Optional, Any
from loguru import logger as loguru_logger

# Global configuration state
_configured = False


def configure(
    level: str = "INFO",
    format: Optional[str] = None,
    rotation: str = "100 MB",
    retention: str = "30 days",
    compression: str = "gz",
) -> None:
    """Configure OmniNATS logging with smart defaults."""
    global _configured

    # Get environment configuration
    env_level = os.getenv("OMNINATS_LOG_LEVEL", level).upper()
    env_mode = os.getenv("OMNINATS_LOG_MODE", "DEV").upper()
    env_file = os.getenv("OMNINATS_LOG_FILE", "logs/omninats.log")
    env_rotation = os.getenv("OMNINATS_LOG_ROTATION", rotation)
    env_retention = os.getenv("OMNINATS_LOG_RETENTION", retention)

    # Remove default handler
    loguru_logger.remove()

    if format is None:
        if env_mode == "PROD":
            format_str = "{message}"  # JSON via serialize
        else:
            format_str = (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
                "<level>{message}</level>"
            )
    else:
        format_str = format

    if env_mode == "DEV":
        loguru_logger.add(sys.stderr, format=format_str, level=env_level, colorize=True)

    if env_mode == "PROD" or os.getenv("OMNINATS_LOG_FILE"):
        loguru_logger.add(
            env_file,
            format=format_str,
            level=env_level,
            rotation=env_rotation,
            retention=env_retention,
            compression=compression,
            serialize=(env_mode == "PROD"),
        )

    _configured = True


def get_logger(name: str = "omninats", connection: Optional[str] = None, **context) -> Any:
    """
    Get configured logger instance.

    Args:
        name: Logger name bound as ``extra["name"]``
        connection: NATS connection name bound as ``extra["connection"]``
        **context: Additional context, e.g. ``subject``
    """
    if not _configured:
        configure()
    if connection is not None:
        context["connection"] = connection
    return loguru_logger.bind(name=name, **context)


def log_serdes_selected(serdes_name: str, type_name: str) -> None:
    """Log which serdes was picked for a type."""
    get_logger().debug(f"SerDes selected: {serdes_name} for [{type_name}]")


def log_message_published(connection: str, subject: str, size: int) -> None:
    """Log a published message."""
    get_logger(connection=connection, subject=subject).debug(
        f"Message published to {subject} ({size} bytes)"
    )


def log_request_sent(connection: str, subject: str, size: int, timeout: float) -> None:
    """Log an outgoing request."""
    get_logger(connection=connection, subject=subject).debug(
        f"Request sent to {subject} ({size} bytes, timeout {timeout}s)"
    )


def log_connection_opened(name: str, servers: list) -> None:
    """Log an established NATS connection."""
    get_logger(connection=name).info(f"NATS connection '{name}' opened: {', '.join(servers)}")


def log_connection_closed(name: str) -> None:
    """Log a closed NATS connection."""
    get_logger(connection=name).info(f"NATS connection '{name}' closed")


def log_serialization_error(operation: str, error: str) -> None:
    """Log serialization error."""
    get_logger().error(f"Serialization error during {operation}: {error}")


# Initialize logging on import
configure()
