"""Value resolution against a surface's data model."""

from dataclasses import dataclass
from typing import Any

from ..errors import BindingError
from ..protocol.components import ValueKind
from ..protocol.values import LiteralBoolean, LiteralNumber, LiteralString, PathRef
from .data_model import DataModelStore, format_path, join_path, normalize_path, split_path


@dataclass(frozen=True)
class Scope:
    """
    Binding scope for path resolution.

    ``prefix`` is the absolute path of the template element in scope (the
    root outside templates); ``indices`` are the element indices of every
    enclosing template, outermost first.
    """

    prefix: str = "/"
    indices: tuple[int, ...] = ()

    @classmethod
    def root(cls) -> "Scope":
        return cls()

    @property
    def in_template(self) -> bool:
        return bool(self.indices)

    def apply(self, path: str) -> str:
        """Absolute paths pass through; relative ones are prefixed; ``.`` is the element itself."""
        if path.startswith("/"):
            return normalize_path(path)
        relative = [segment for segment in split_path(path) if segment != "."]
        return format_path(split_path(self.prefix) + relative)

    def child(self, array_path: str, index: int) -> "Scope":
        """Scope of element ``index`` of the (absolute) array at ``array_path``."""
        return Scope(prefix=join_path(array_path, index), indices=self.indices + (index,))

    def instance_id(self, component_id: str) -> str:
        """Id of ``component_id`` instantiated in this scope (``item#0``, ``cell#1.2``)."""
        if not self.indices:
            return component_id
        return f"{component_id}#{'.'.join(str(index) for index in self.indices)}"


ROOT_SCOPE = Scope.root()


def format_number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class ValueResolver:
    """Resolves value references for one surface and writes bound values back."""

    def __init__(self, store: DataModelStore) -> None:
        self.store = store

    def resolve(self, ref: Any, scope: Scope = ROOT_SCOPE) -> Any | None:
        """
        Resolve a value reference.

        Returns:
            The literal constant, the data node at the scoped path, or None
            when the path holds nothing yet
        """
        if isinstance(ref, (LiteralString, LiteralNumber, LiteralBoolean)):
            return ref.value
        if isinstance(ref, PathRef):
            return self.store.get(scope.apply(ref.path))
        raise TypeError(f"Not a value reference: {type(ref).__name__}")

    def resolve_as(
        self,
        ref: Any,
        scope: Scope,
        kind: ValueKind,
        component_id: str | None = None,
    ) -> Any | None:
        """
        Resolve and check the value against the property's kind.

        Strings accept any scalar (numbers and booleans are displayed as text).

        Raises:
            BindingError: Resolved value has the wrong kind
        """
        value = self.resolve(ref, scope)
        if value is None:
            return None

        if kind is ValueKind.STRING:
            if isinstance(value, str):
                return value
            if isinstance(value, bool):
                return "true" if value else "false"
            if isinstance(value, (int, float)):
                return format_number(value)
        elif kind is ValueKind.NUMBER:
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return value
        elif kind is ValueKind.BOOLEAN:
            if isinstance(value, bool):
                return value

        where = f" at {scope.apply(ref.path)}" if isinstance(ref, PathRef) else ""
        raise BindingError(
            f"Expected {kind.value}, got {type(value).__name__}{where}",
            component_id=component_id,
            path=scope.apply(ref.path) if isinstance(ref, PathRef) else None,
        )

    def resolve_and_write(
        self,
        ref: Any,
        scope: Scope,
        value: Any,
        component_id: str | None = None,
    ) -> Any | None:
        """
        Write a control value through its binding.

        Returns:
            Previous value at the bound path

        Raises:
            BindingError: Reference is a literal (nothing to write to)
            InvalidPath: Bound path runs through a scalar
        """
        if not isinstance(ref, PathRef):
            raise BindingError(
                f"Cannot write through a literal reference ({type(ref).__name__})",
                component_id=component_id,
            )
        target = scope.apply(ref.path)
        try:
            return self.store.merge(target, value)
        except BindingError as e:
            e.component_id = e.component_id or component_id
            raise
