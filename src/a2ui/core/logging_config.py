"""
Structured Logging Configuration
Surface-aware logging with structlog.
"""

import logging
import sys
from typing import Any

import structlog
from pythonjsonlogger import jsonlogger

from .config import Settings, get_settings


def configure_logging(
    level: str | None = None,
    json_logs: bool | None = None,
    settings: Settings | None = None,
) -> None:
    """
    Configure structured logging for the runtime.

    Explicit arguments win over settings; settings default to get_settings().

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Use JSON formatter for machine-readable logs
        settings: Settings to read defaults from
    """
    settings = settings or get_settings()
    level = level or settings.log_level
    json_logs = settings.json_logs if json_logs is None else json_logs
    log_level = getattr(logging, level.upper(), logging.INFO)

    if json_logs:
        handler = logging.StreamHandler(sys.stdout)
        formatter = jsonlogger.JsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        handler.setFormatter(formatter)
        logging.basicConfig(level=log_level, handlers=[handler], force=True)
    else:
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            stream=sys.stdout,
            force=True,
        )

    structlog.configure(
        processors=[
            # surface_id / message bound by SurfaceContext
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance (name is typically __name__)."""
    return structlog.get_logger(name)


class SurfaceContext:
    """Bind surface identity to every log line emitted in scope."""

    def __init__(self, surface_id: str, **extra: Any):
        self.context = {"surface_id": surface_id, **extra}

    def __enter__(self) -> "SurfaceContext":
        structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.unbind_contextvars(*self.context.keys())
