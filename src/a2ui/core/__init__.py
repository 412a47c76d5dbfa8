"""Core utilities and infrastructure."""

from .config import Settings, get_settings
from .validate import (
    ValidationError,
    ValidationResult,
    validate_json_size,
    validate_json_depth,
)
from .logging_config import configure_logging, get_logger, SurfaceContext
from .json import decode_json, split_documents, safe_json_dumps, JSONParseError
from .id import ActionID, new_action_id, is_action_id


def create_container(settings: Settings | None = None, action_sink=None):
    """Create dependency injection container (lazy import to avoid circular deps)."""
    from .container import create_container as _create_container

    return _create_container(settings=settings, action_sink=action_sink)


__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Validation
    "ValidationError",
    "ValidationResult",
    "validate_json_size",
    "validate_json_depth",
    # Logging
    "configure_logging",
    "get_logger",
    "SurfaceContext",
    # JSON
    "decode_json",
    "split_documents",
    "safe_json_dumps",
    "JSONParseError",
    # IDs
    "ActionID",
    "new_action_id",
    "is_action_id",
    # DI
    "create_container",
]
