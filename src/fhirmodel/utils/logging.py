"""Logging configuration for the FHIR object model.

The library emits a handful of structured events, keyed by event name:

* ``model_build_failed`` (debug) when a builder cannot produce a valid
  instance, with ``model_type`` and ``error_code``
* ``model_type_replaced`` (debug) when a second class registers under an
  existing FHIR type name
* ``constraint_not_evaluated`` (debug), ``constraint_violations_found``
  (warning) and ``constraint_validation_completed`` (info) from
  :class:`~fhirmodel.validation.ConstraintValidator`

Without :func:`setup_logging` these go through structlog's default
configuration. After it, they are routed through stdlib logging and rendered
as console text or JSON according to ``FHIR_MODEL_LOG_FORMAT``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.stdlib import BoundLogger, LoggerFactory

from fhirmodel.config import get_settings


def setup_logging() -> None:
    """Configure structured logging for the library and its callers."""
    settings = get_settings()

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level.upper()),
    )

    # Configure structlog
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
            render_processor(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )


def render_processor() -> Any:
    """Choose renderer based on settings."""
    settings = get_settings()

    if settings.log_format == "json":
        return structlog.processors.JSONRenderer()
    else:
        return structlog.dev.ConsoleRenderer()


def get_logger(name: str) -> BoundLogger:
    """Get a configured logger instance."""
    bound_logger: BoundLogger = structlog.get_logger(name)
    return bound_logger
