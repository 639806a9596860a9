"""Structured logging configuration with structlog."""

import logging

import structlog

from authsvc.config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure structlog once per process: JSON in deployments, console when debugging."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    json_output = settings.log_format == "json" and not settings.debug

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]
    if json_output:
        processors += [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        processors += [structlog.processors.UnicodeDecoder(), structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level)
    logging.getLogger().setLevel(level)
    # SQL echo is controlled by the engine, not the root level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
