"""Structured logging configuration for ModelBoard services.

This module standardizes logging using ``structlog``. It produces either JSON
(for machines) or a pretty console format (for humans) and binds the service
name so logs are useful when aggregated.

Typical usage
- Call ``configure_logging(service_name, log_level, log_format)`` at startup
- Acquire loggers via ``structlog.get_logger(name)`` or ``ServiceLogger``
"""

import logging
import sys
from typing import Any, Optional, TextIO
import structlog
from structlog.stdlib import LoggerFactory, add_logger_name


def configure_logging(
    service_name: str,
    log_level: str = "INFO",
    log_format: str = "json",
    stream: Optional[TextIO] = None,
) -> None:
    """Configure structured logging for a service.

    Parameters
    - service_name: Logical service identifier bound to each log line
    - log_level: ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR`` (case-insensitive)
    - log_format: ``json`` for production; ``console`` for local dev
    - stream: Where log lines go (stdout by default)
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
    )
    logging.getLogger().setLevel(level)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_logger_name,
    ]

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(service=service_name)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


class ServiceLogger:
    """Service-specific logger with common context."""

    def __init__(self, service_name: str, **context: Any):
        self.service_name = service_name
        self.logger = structlog.get_logger(service_name)
        self.context = context

    def bind(self, **kwargs: Any) -> "ServiceLogger":
        """Return a new ``ServiceLogger`` carrying the merged context."""
        return ServiceLogger(self.service_name, **{**self.context, **kwargs})

    def info(self, message: str, **kwargs: Any) -> None:
        self.logger.info(message, **{**self.context, **kwargs})

    def warning(self, message: str, **kwargs: Any) -> None:
        self.logger.warning(message, **{**self.context, **kwargs})

    def error(self, message: str, **kwargs: Any) -> None:
        self.logger.error(message, **{**self.context, **kwargs})

    def debug(self, message: str, **kwargs: Any) -> None:
        self.logger.debug(message, **{**self.context, **kwargs})

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self.logger.exception(message, **{**self.context, **kwargs})


def log_performance(operation: str, duration_ms: float, **kwargs: Any) -> None:
    """Log performance metrics.

    Parameters
    - operation: A stable identifier for the measured unit of work
    - duration_ms: Elapsed time in milliseconds
    - kwargs: Additional dimensions (e.g., listing name, status)
    """
    logger = get_logger("performance")
    logger.info(
        f"Operation {operation} completed",
        operation=operation,
        duration_ms=duration_ms,
        **kwargs
    )
