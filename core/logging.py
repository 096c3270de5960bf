"""
structlog setup for the wiki service.

configure_logging() is called once from the app lifespan. Events carry an
ISO timestamp, the level and the environment name; in development they are
printed as coloured console lines, elsewhere as one JSON object per line so
the store/session events can be grepped by key (page_id, user_id, ...).
"""

import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import Processor

from core.config import Settings, get_settings


def _resolve_level(name: str) -> int:
    """Numeric level for a name like "debug"; unknown names fall back to INFO."""
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else logging.INFO


def _add_environment(environment: str) -> Processor:
    def processor(logger: Any, method_name: str, event_dict: dict) -> dict:
        event_dict.setdefault("environment", environment)
        return event_dict
    return processor


def _renderer(settings: Settings) -> list[Processor]:
    if settings.is_development:
        return [structlog.dev.ConsoleRenderer(colors=True)]
    return [
        structlog.processors.dict_tracebacks,
        structlog.processors.JSONRenderer(),
    ]


def configure_logging(settings: Optional[Settings] = None) -> None:
    """Install the processor chain and level filter for this process."""
    settings = settings or get_settings()
    level = _resolve_level(settings.log_level)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        _add_environment(settings.environment),
    ]

    structlog.configure(
        processors=processors + _renderer(settings),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )

    # uvicorn access/error lines go through stdlib logging
    logging.basicConfig(
        format="%(message)s",
        level=level,
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: Optional[str] = None, **bound: Any) -> structlog.BoundLogger:
    """
    Logger for a module, optionally with keys bound up front.

        logger = get_logger(__name__, store="json")
        logger.info("Document flushed", pages=12)
    """
    logger = structlog.get_logger(name)
    return logger.bind(**bound) if bound else logger
