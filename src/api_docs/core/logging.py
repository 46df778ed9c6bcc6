"""Logging configuration for the Local API Docs server."""

import logging
import sys
from typing import List, Optional, Union

import structlog

from api_docs.core.config import Settings, get_settings

# Name of the root handler installed here, so repeated setup replaces it
HANDLER_NAME = "api_docs"


def _shared_processors() -> List[structlog.types.Processor]:
    """Processors applied to structlog and stdlib records alike."""
    return [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.ExtraAdder(),
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Setup structured logging for the application.

    Module loggers use the stdlib ``logging.getLogger(__name__)`` and pass
    context through ``extra=``; those fields are rendered next to the event
    the same way as structlog key/value pairs.
    """
    settings = settings or get_settings()
    level = getattr(logging, settings.LOG_LEVEL.upper())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=_render_processors(settings),
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    for existing in list(root.handlers):
        if existing.get_name() == HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)


def _render_processors(settings: Settings) -> List[structlog.types.Processor]:
    processors: List[structlog.types.Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if settings.LOG_FORMAT.lower() == "json":
        # ConsoleRenderer formats exceptions itself
        processors.append(structlog.processors.format_exc_info)
    processors.append(_get_renderer(settings))
    return processors


def _get_renderer(settings: Settings) -> Union[structlog.processors.JSONRenderer, structlog.dev.ConsoleRenderer]:
    """Get the appropriate log renderer based on configuration."""
    if settings.LOG_FORMAT.lower() == "json":
        return structlog.processors.JSONRenderer()
    else:
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
