"""User action dispatch to the controller boundary."""

import threading
from collections import deque
from typing import Any, Callable

from ..core import get_logger, get_settings, Settings
from ..errors import BindingError
from ..protocol.components import ActionDefinition
from ..protocol.messages import UserAction
from ..protocol.values import PathRef
from .resolver import Scope, ValueResolver

logger = get_logger(__name__)

ActionSink = Callable[[UserAction], None]


class ActionDispatcher:
    """
    Packages user interactions as outbound actions.

    Delivery is fire-and-forget: the sink is called synchronously and a
    failing sink is logged without affecting surface state. Retries are the
    controller's concern.
    """

    def __init__(self, sink: ActionSink | None = None, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._sink = sink
        self._sent: deque[UserAction] = deque(maxlen=self.settings.action_history_size)
        self._lock = threading.Lock()

    @property
    def sent(self) -> list[UserAction]:
        """Recently emitted actions, oldest first."""
        with self._lock:
            return list(self._sent)

    def set_sink(self, sink: ActionSink | None) -> None:
        self._sink = sink

    def build(
        self,
        surface_id: str,
        component_id: str,
        action: ActionDefinition,
        resolver: ValueResolver,
        scope: Scope,
    ) -> UserAction:
        """Resolve the action context against the current data model."""
        context: dict[str, Any] = {}
        for entry in action.context:
            context[entry.key] = resolver.resolve(entry.value, scope)

        return UserAction(
            surface_id=surface_id,
            component_id=scope.instance_id(component_id),
            name=action.name,
            context=context,
        )

    def emit(self, action: UserAction) -> None:
        """Hand an action to the controller sink."""
        with self._lock:
            self._sent.append(action)

        logger.info(
            "action_dispatched",
            surface_id=action.surface_id,
            component_id=action.component_id,
            action=action.name,
        )
        if self._sink is None:
            return
        try:
            self._sink(action)
        except Exception as e:
            logger.error("action_sink_failed", action=action.name, action_id=action.id, error=str(e))

    def dispatch(
        self,
        surface_id: str,
        component_id: str,
        action: ActionDefinition,
        resolver: ValueResolver,
        scope: Scope,
    ) -> UserAction:
        """Build and emit in one step."""
        user_action = self.build(surface_id, component_id, action, resolver, scope)
        self.emit(user_action)
        return user_action

    def value_changed(
        self,
        surface_id: str,
        component_id: str,
        ref: Any,
        resolver: ValueResolver,
        scope: Scope,
        value: Any,
    ) -> UserAction | None:
        """
        Write a control edit through its binding immediately (no debounce).

        Returns:
            Companion action to emit when value-change actions are enabled,
            else None

        Raises:
            BindingError: Reference is a literal or the path is invalid
        """
        resolver.resolve_and_write(ref, scope, value, component_id=component_id)
        logger.debug("control_value_written", surface_id=surface_id, component_id=component_id)

        if not self.settings.emit_value_change_actions:
            return None
        if not isinstance(ref, PathRef):
            raise BindingError(
                f"Cannot report a value change through {type(ref).__name__}",
                surface_id=surface_id,
                component_id=component_id,
            )
        return UserAction(
            surface_id=surface_id,
            component_id=scope.instance_id(component_id),
            name=self.settings.value_change_action,
            context={
                "componentId": scope.instance_id(component_id),
                "path": scope.apply(ref.path),
                "value": value,
            },
        )
