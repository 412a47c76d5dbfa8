"""
Component Graph
Arena of component definitions keyed by id.

Children are referenced by id and resolved lazily, so definitions may arrive
in any order (forward references included) and replacing a definition never
leaves stale links behind. Referential integrity is checked at render time.
"""

from typing import Iterable, Iterator

from ..errors import DanglingReference
from ..protocol.components import ComponentBase, Template
from .resolver import ROOT_SCOPE, Scope
from .template import ChildInstance, TemplateExpander


class ComponentGraph:
    """Component definitions of one surface."""

    def __init__(self, expander: TemplateExpander) -> None:
        self.expander = expander
        self._components: dict[str, ComponentBase] = {}

    def put(self, definition: ComponentBase) -> ComponentBase | None:
        """Insert or replace by id (last write wins). Returns the replaced definition."""
        previous = self._components.get(definition.id)
        self._components[definition.id] = definition
        return previous

    def put_all(self, definitions: Iterable[ComponentBase]) -> list[str]:
        """Insert a batch in order; returns the ids written."""
        written = []
        for definition in definitions:
            self.put(definition)
            written.append(definition.id)
        return written

    def get(self, component_id: str) -> ComponentBase | None:
        return self._components.get(component_id)

    def require(self, component_id: str, referrer: str | None = None) -> ComponentBase:
        """
        Get a definition that must exist.

        Raises:
            DanglingReference: No component with that id
        """
        definition = self._components.get(component_id)
        if definition is None:
            where = f" (referenced by {referrer!r})" if referrer else ""
            raise DanglingReference(
                f"Component {component_id!r} is not defined{where}", component_id=component_id
            )
        return definition

    def children(self, component_id: str, scope: Scope = ROOT_SCOPE) -> list[ChildInstance]:
        """
        Ordered children of a component in ``scope``.

        Explicit lists (and Card/Button ``child``) keep the parent's scope;
        templates delegate to the TemplateExpander.

        Raises:
            DanglingReference: ``component_id`` itself is not defined
            BindingError: Template binding is missing or not an array
        """
        definition = self.require(component_id)
        children = getattr(definition, "children", None)
        if isinstance(children, Template):
            return self.expander.expand(children, scope, owner_id=component_id)
        return [ChildInstance(child_id, scope) for child_id in definition.child_ids()]

    def dangling_references(self) -> list[tuple[str, str]]:
        """``(owner, missing id)`` pairs across the whole graph."""
        return [
            (owner_id, child_id)
            for owner_id, definition in self._components.items()
            for child_id in definition.child_ids()
            if child_id not in self._components
        ]

    def ids(self) -> list[str]:
        return list(self._components)

    def clear(self) -> None:
        self._components.clear()

    def __contains__(self, component_id: object) -> bool:
        return component_id in self._components

    def __len__(self) -> int:
        return len(self._components)

    def __iter__(self) -> Iterator[ComponentBase]:
        return iter(list(self._components.values()))
