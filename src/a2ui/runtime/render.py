"""
Render Tree
Walks a surface from its root and produces an immutable, fully resolved tree
for the rendering backend.

Error policy:
- Dangling id: an explicit ``Placeholder`` node takes its place and an issue
  is recorded; the rest of the surface renders.
- Binding error: the offending node carries ``error``; siblings and
  descendants still render.
- Cycle: the whole pass fails with CycleDetected; the surface stays usable.
"""

from collections import deque
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core import get_logger, safe_json_dumps
from ..errors import A2uiError, BindingError, CycleDetected, DanglingReference
from ..protocol.components import ActionDefinition, ComponentBase, ValueKind
from ..protocol.values import PathRef, is_literal
from .graph import ComponentGraph
from .resolver import ROOT_SCOPE, Scope, ValueResolver

logger = get_logger(__name__)

PLACEHOLDER = "Placeholder"

# Structural properties: rendered as children, not as values
_STRUCTURAL = frozenset({"children", "child"})


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)


class RenderIssue(_Node):
    """Problem found during a render pass."""

    kind: str
    message: str
    component_id: str | None = None
    instance_id: str | None = None
    path: str | None = None


class RenderNode(_Node):
    """Resolved component instance."""

    id: str
    instance_id: str
    type: str
    scope: Scope = ROOT_SCOPE
    weight: float | None = None
    properties: dict[str, Any] = Field(default_factory=dict)
    # Property name -> absolute data-model path it is bound to
    bindings: dict[str, str] = Field(default_factory=dict)
    children: list["RenderNode"] = Field(default_factory=list)
    error: str | None = None

    def walk(self):
        """Depth-first iteration over this node and its descendants."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class RenderSnapshot(_Node):
    """One render pass of a surface."""

    surface_id: str
    root: str
    version: int
    styles: dict[str, Any] | None = None
    tree: RenderNode
    issues: list[RenderIssue] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues

    def find(self, instance_id: str) -> RenderNode | None:
        """Node by instance id (``title``, ``row#2``)."""
        for node in self.tree.walk():
            if node.instance_id == instance_id:
                return node
        return None

    def to_json(self) -> str:
        return safe_json_dumps(self.model_dump(mode="json", by_alias=True))


class _Frame:
    """A resolved component whose children are still being visited."""

    __slots__ = ("component_id", "instance_id", "scope", "definition",
                 "properties", "bindings", "errors", "pending", "children")

    def __init__(self, component_id, instance_id, scope, definition, properties, bindings, errors, pending):
        self.component_id = component_id
        self.instance_id = instance_id
        self.scope = scope
        self.definition = definition
        self.properties = properties
        self.bindings = bindings
        self.errors = errors
        self.pending = pending
        self.children: list[RenderNode] = []

    def finish(self) -> RenderNode:
        return RenderNode(
            id=self.component_id,
            instance_id=self.instance_id,
            type=self.definition.type,
            scope=self.scope,
            weight=self.definition.weight,
            properties=self.properties,
            bindings=self.bindings,
            children=self.children,
            error="; ".join(self.errors) if self.errors else None,
        )


class TreeBuilder:
    """
    Single-use walker for one render pass.

    The walk keeps its own stack, so tree depth is bounded by memory rather
    than by the interpreter's recursion limit.
    """

    def __init__(self, graph: ComponentGraph, resolver: ValueResolver) -> None:
        self.graph = graph
        self.resolver = resolver
        self.issues: list[RenderIssue] = []
        self._ancestry: list[tuple[str, str]] = []
        self._on_path: set[tuple[str, str]] = set()

    def build(self, root_id: str) -> RenderNode:
        """
        Resolve the tree under ``root_id``.

        Raises:
            CycleDetected: A component is its own ancestor in the same scope
        """
        entered = self._enter(root_id, ROOT_SCOPE, referrer=None)
        if isinstance(entered, RenderNode):
            return entered

        stack = [entered]
        while True:
            frame = stack[-1]
            if frame.pending:
                instance = frame.pending.popleft()
                entered = self._enter(instance.component_id, instance.scope, frame.component_id)
                if isinstance(entered, RenderNode):
                    frame.children.append(entered)
                else:
                    stack.append(entered)
                continue

            stack.pop()
            self._on_path.discard(self._ancestry.pop())
            node = frame.finish()
            if not stack:
                return node
            stack[-1].children.append(node)

    def _enter(self, component_id: str, scope: Scope, referrer: str | None) -> "RenderNode | _Frame":
        """Resolve one component; leaves come back finished, parents as a frame."""
        key = (component_id, scope.prefix)
        if key in self._on_path:
            start = self._ancestry.index(key)
            cycle = [entry[0] for entry in self._ancestry[start:]] + [component_id]
            logger.warning("render_cycle", cycle=cycle)
            raise CycleDetected(
                f"Cycle through {' -> '.join(cycle)}", cycle=cycle, component_id=component_id
            )

        instance_id = scope.instance_id(component_id)
        definition = self.graph.get(component_id)
        if definition is None:
            error = DanglingReference(
                f"Component {component_id!r} is not defined"
                + (f" (referenced by {referrer!r})" if referrer else ""),
                component_id=component_id,
            )
            self._record(error, instance_id)
            return RenderNode(
                id=component_id,
                instance_id=instance_id,
                type=PLACEHOLDER,
                scope=scope,
                error=error.message,
            )

        properties, bindings, errors = self._resolve_properties(definition, scope, instance_id)
        try:
            instances = self.graph.children(component_id, scope)
        except BindingError as e:
            self._record(e, instance_id)
            errors.append(e.message)
            instances = []

        self._ancestry.append(key)
        self._on_path.add(key)
        return _Frame(
            component_id, instance_id, scope, definition, properties, bindings, errors, deque(instances)
        )

    def _resolve_properties(
        self, definition: ComponentBase, scope: Scope, instance_id: str
    ) -> tuple[dict[str, Any], dict[str, str], list[str]]:
        properties: dict[str, Any] = {}
        bindings: dict[str, str] = {}
        errors: list[str] = []

        for field_name, value in definition.properties().items():
            if field_name in _STRUCTURAL or value is None:
                continue
            name = to_camel(field_name)
            if isinstance(value, PathRef) or is_literal(value):
                if isinstance(value, PathRef):
                    bindings[name] = scope.apply(value.path)
                kind = definition.value_kinds.get(field_name, ValueKind.STRING)
                try:
                    properties[name] = self.resolver.resolve_as(
                        value, scope, kind, component_id=definition.id
                    )
                except BindingError as e:
                    self._record(e, instance_id)
                    errors.append(e.message)
                    properties[name] = None
            elif isinstance(value, ActionDefinition):
                properties[name] = {
                    "name": value.name,
                    "context": [entry.key for entry in value.context],
                }
            else:
                properties[name] = value

        return properties, bindings, errors

    def _record(self, error: A2uiError, instance_id: str) -> None:
        self.issues.append(
            RenderIssue(
                kind=error.kind,
                message=error.message,
                component_id=error.component_id,
                instance_id=instance_id,
                path=error.path,
            )
        )


RenderNode.model_rebuild()
