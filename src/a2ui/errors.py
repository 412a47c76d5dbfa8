"""Runtime error kinds.

None of these are process-fatal: the registry and surfaces stay usable after
any of them is raised.
"""

from typing import Any


class A2uiError(Exception):
    """Base class for protocol and runtime errors."""

    kind = "a2ui_error"

    def __init__(
        self,
        message: str,
        *,
        surface_id: str | None = None,
        component_id: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.surface_id = surface_id
        self.component_id = component_id
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        """Export for the controller boundary."""
        data: dict[str, Any] = {"kind": self.kind, "message": self.message}
        if self.surface_id is not None:
            data["surfaceId"] = self.surface_id
        if self.component_id is not None:
            data["componentId"] = self.component_id
        if self.path is not None:
            data["path"] = self.path
        return data


class MalformedMessage(A2uiError):
    """Schema violation; the whole message is rejected."""

    kind = "malformed_message"


class UnknownSurface(A2uiError):
    """Message for a surface that was never begun, or a repeated begin."""

    kind = "unknown_surface"


class SurfaceTornDown(A2uiError):
    """Surface no longer accepts messages."""

    kind = "surface_torn_down"


class DanglingReference(A2uiError):
    """Child or template id not defined at render time."""

    kind = "dangling_reference"


class CycleDetected(A2uiError):
    """Explicit children form a cycle."""

    kind = "cycle_detected"

    def __init__(self, message: str, *, cycle: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(message, **kwargs)
        self.cycle = cycle or []


class BindingError(A2uiError):
    """Binding could not be resolved or written."""

    kind = "binding_error"


class InvalidPath(BindingError):
    """Path traverses a scalar as though it were a container."""

    kind = "invalid_path"


class UnsupportedInteraction(A2uiError):
    """Control event sent to a component that cannot receive it."""

    kind = "unsupported_interaction"
