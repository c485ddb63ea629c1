"""
Logging Setup
=============
structlog configuration for services that embed the filter.

Usage:
    from fingerprint_core.log import setup_logging

    setup_logging(service_name="orders-api")
"""

import logging
import sys

import structlog


def setup_logging(
    service_name: str,
    level: str = "INFO",
    json_output: bool = True,
) -> structlog.stdlib.BoundLogger:
    """
    Configure structlog on top of the standard logging module.

    Args:
        service_name: Name bound to every log line
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: JSON lines for production, console output otherwise

    Returns:
        Logger bound to the service name
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
        force=True,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer()
            if json_output
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.bind_contextvars(service=service_name)

    logger = structlog.get_logger("fingerprint_core")
    logger.info("logging_configured", level=level.upper())
    return logger
