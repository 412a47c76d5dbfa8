"""
Surface
One live UI surface: a component graph, a data model and a root id.

Every protocol message, control write and render pass runs under the
surface's re-entrant lock, so each observes a consistent state. Outbound
actions are handed to the dispatcher after the lock is released.
"""

import threading
from enum import Enum
from typing import Any

from ..core import get_logger, SurfaceContext
from ..errors import (
    BindingError,
    SurfaceTornDown,
    UnknownSurface,
    UnsupportedInteraction,
)
from ..protocol.components import Button, ValueKind
from ..protocol.messages import (
    BeginRendering,
    DataModelUpdate,
    DeleteSurface,
    InboundMessage,
    SurfaceUpdate,
    UserAction,
)
from .actions import ActionDispatcher
from .data_model import DataModelStore, join_path
from .events import (
    ComponentsUpdated,
    DataModelUpdated,
    ProcessorEvent,
    SurfaceCreated,
    SurfaceDeleted,
)
from .graph import ComponentGraph
from .render import RenderSnapshot, TreeBuilder
from .resolver import ROOT_SCOPE, Scope, ValueResolver
from .template import TemplateExpander

logger = get_logger(__name__)


class SurfaceState(str, Enum):
    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"
    TORN_DOWN = "torn_down"


def _check_control_value(value: Any, kind: ValueKind, component_id: str) -> None:
    if kind is ValueKind.BOOLEAN:
        ok = isinstance(value, bool)
    elif kind is ValueKind.NUMBER:
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    else:
        ok = isinstance(value, str)
    if not ok:
        raise BindingError(
            f"{component_id!r} takes a {kind.value} value, got {type(value).__name__}",
            component_id=component_id,
        )


class Surface:
    """
    Live surface state machine: UNINITIALIZED -> ACTIVE -> TORN_DOWN.

    Examples:
        >>> surface = Surface("main")
        >>> surface.state
        <SurfaceState.UNINITIALIZED: 'uninitialized'>
    """

    def __init__(self, surface_id: str, dispatcher: ActionDispatcher | None = None) -> None:
        self.surface_id = surface_id
        self.dispatcher = dispatcher or ActionDispatcher()
        self.store = DataModelStore()
        self.resolver = ValueResolver(self.store)
        self.expander = TemplateExpander(self.store)
        self.graph = ComponentGraph(self.expander)

        self._lock = threading.RLock()
        self._state = SurfaceState.UNINITIALIZED
        self._root: str | None = None
        self._styles: dict[str, Any] | None = None

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def root(self) -> str | None:
        return self._root

    @property
    def styles(self) -> dict[str, Any] | None:
        return self._styles

    @property
    def is_active(self) -> bool:
        return self._state is SurfaceState.ACTIVE

    def _require_active(self) -> None:
        if self._state is SurfaceState.TORN_DOWN:
            raise SurfaceTornDown(
                f"Surface {self.surface_id!r} has been torn down", surface_id=self.surface_id
            )
        if self._state is SurfaceState.UNINITIALIZED:
            raise UnknownSurface(
                f"Surface {self.surface_id!r} has not begun rendering", surface_id=self.surface_id
            )

    def apply(self, message: InboundMessage) -> list[ProcessorEvent]:
        """
        Apply one protocol message atomically.

        Returns:
            Events describing what changed

        Raises:
            UnknownSurface: Message addressed to another surface, a repeated
                beginRendering, or content before beginRendering
            SurfaceTornDown: Surface no longer accepts messages
            BindingError: Data model update could not be merged (nothing applied)
        """
        if message.surface_id != self.surface_id:
            raise UnknownSurface(
                f"Message for {message.surface_id!r} sent to surface {self.surface_id!r}",
                surface_id=message.surface_id,
            )

        with self._lock, SurfaceContext(self.surface_id, message=type(message).__name__):
            if self._state is SurfaceState.TORN_DOWN:
                raise SurfaceTornDown(
                    f"Surface {self.surface_id!r} has been torn down", surface_id=self.surface_id
                )

            if isinstance(message, BeginRendering):
                return self._begin(message)

            self._require_active()

            if isinstance(message, SurfaceUpdate):
                written = self.graph.put_all(message.components)
                logger.info("components_updated", count=len(written))
                return [ComponentsUpdated(self.surface_id, tuple(written))]

            if isinstance(message, DataModelUpdate):
                return self._update_data(message)

            if isinstance(message, DeleteSurface):
                self.teardown()
                return [SurfaceDeleted(self.surface_id)]

        raise TypeError(f"Unsupported message type: {type(message).__name__}")

    def _begin(self, message: BeginRendering) -> list[ProcessorEvent]:
        if self._state is not SurfaceState.UNINITIALIZED:
            raise UnknownSurface(
                f"Surface {self.surface_id!r} already began rendering", surface_id=self.surface_id
            )
        self._root = message.root
        self._styles = dict(message.styles) if message.styles else None
        self._state = SurfaceState.ACTIVE
        logger.info("surface_created", root=message.root)
        return [SurfaceCreated(self.surface_id, message.root)]

    def _update_data(self, message: DataModelUpdate) -> list[ProcessorEvent]:
        try:
            with self.store.transaction():
                for entry in message.contents:
                    self.store.merge(join_path(message.path, entry.key), entry.value)
        except BindingError as e:
            e.surface_id = self.surface_id
            logger.warning("data_model_update_rejected", path=message.path, error=e.message)
            raise

        changed = tuple(sorted(self.store.drain_changes()))
        logger.info("data_model_updated", path=message.path, entries=len(message.contents))
        return [DataModelUpdated(self.surface_id, changed)]

    def render(self) -> RenderSnapshot:
        """
        Resolve the whole surface from its root.

        Raises:
            UnknownSurface: Surface has not begun rendering
            SurfaceTornDown: Surface was torn down
            CycleDetected: Explicit children form a cycle (surface stays usable)
        """
        with self._lock:
            self._require_active()
            builder = TreeBuilder(self.graph, self.resolver)
            tree = builder.build(self._root)
            snapshot = RenderSnapshot(
                surface_id=self.surface_id,
                root=self._root,
                version=self.store.version,
                styles=self._styles,
                tree=tree,
                issues=builder.issues,
            )

        if builder.issues:
            logger.debug("render_issues", surface_id=self.surface_id, count=len(builder.issues))
        return snapshot

    def change_value(
        self, component_id: str, value: Any, scope: Scope | None = None
    ) -> UserAction | None:
        """
        Write a control edit through the component's binding.

        ``scope`` is the instance's scope (``RenderNode.scope``) for controls
        inside templates.

        Returns:
            The companion value-change action, if one was emitted

        Raises:
            DanglingReference: Unknown component
            UnsupportedInteraction: Component has no bindable value
            BindingError: Wrong value kind, literal binding, or invalid path
        """
        scope = scope or ROOT_SCOPE
        with self._lock:
            self._require_active()
            definition = self.graph.require(component_id)
            if definition.bindable is None:
                raise UnsupportedInteraction(
                    f"{definition.type} {component_id!r} has no editable value",
                    surface_id=self.surface_id,
                    component_id=component_id,
                )
            kind = definition.value_kinds.get(definition.bindable, ValueKind.STRING)
            _check_control_value(value, kind, component_id)

            ref = getattr(definition, definition.bindable)
            try:
                action = self.dispatcher.value_changed(
                    self.surface_id, component_id, ref, self.resolver, scope, value
                )
            except BindingError as e:
                e.surface_id = self.surface_id
                raise

        if action is not None:
            self.dispatcher.emit(action)
        return action

    def press(self, component_id: str, scope: Scope | None = None) -> UserAction | None:
        """
        Trigger a button's action, resolving its context now.

        Returns:
            The emitted action, or None for a button without one

        Raises:
            DanglingReference: Unknown component
            UnsupportedInteraction: Component is not a Button
        """
        scope = scope or ROOT_SCOPE
        with self._lock:
            self._require_active()
            definition = self.graph.require(component_id)
            if not isinstance(definition, Button):
                raise UnsupportedInteraction(
                    f"{definition.type} {component_id!r} cannot be pressed",
                    surface_id=self.surface_id,
                    component_id=component_id,
                )
            if definition.action is None:
                logger.debug("button_without_action", surface_id=self.surface_id, component_id=component_id)
                return None
            action = self.dispatcher.build(
                self.surface_id, component_id, definition.action, self.resolver, scope
            )

        self.dispatcher.emit(action)
        return action

    def teardown(self) -> None:
        """Release graph and data; every later call raises SurfaceTornDown."""
        with self._lock:
            if self._state is SurfaceState.TORN_DOWN:
                return
            self._state = SurfaceState.TORN_DOWN
            self.graph.clear()
            self.store = DataModelStore()
            self.resolver.store = self.store
            self.expander.store = self.store
            logger.info("surface_torn_down", surface_id=self.surface_id)

    def __repr__(self) -> str:
        return f"Surface({self.surface_id!r}, state={self._state.value}, components={len(self.graph)})"
