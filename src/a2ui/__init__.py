"""
A2UI surface runtime
Interprets declarative UI protocol messages into live, data-bound surfaces.
"""

from .core import Settings, configure_logging, create_container, get_settings
from .errors import (
    A2uiError,
    BindingError,
    CycleDetected,
    DanglingReference,
    InvalidPath,
    MalformedMessage,
    SurfaceTornDown,
    UnknownSurface,
    UnsupportedInteraction,
)
from .protocol import MessageParser, UserAction, parse_messages
from .runtime import (
    ActionDispatcher,
    RenderNode,
    RenderSnapshot,
    Scope,
    Surface,
    SurfaceRegistry,
    SurfaceState,
)

__version__ = "0.1.0"

__all__ = [
    "Settings",
    "configure_logging",
    "create_container",
    "get_settings",
    "A2uiError",
    "BindingError",
    "CycleDetected",
    "DanglingReference",
    "InvalidPath",
    "MalformedMessage",
    "SurfaceTornDown",
    "UnknownSurface",
    "UnsupportedInteraction",
    "MessageParser",
    "UserAction",
    "parse_messages",
    "ActionDispatcher",
    "RenderNode",
    "RenderSnapshot",
    "Scope",
    "Surface",
    "SurfaceRegistry",
    "SurfaceState",
]
