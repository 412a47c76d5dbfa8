"""
Data Model Store
Per-surface hierarchical key-value tree addressed by slash-delimited paths.

Path format (JSON-pointer style):
- ``/`` or empty: the root (always a map)
- ``/user/name``: nested key
- ``/items/0``: array element
- ``~1`` and ``~0`` unescape to ``/`` and ``~`` inside a segment

Writes follow one merge rule everywhere: a map written over a map merges key
by key (recursively); anything else replaces the subtree. Siblings are never
touched.
"""

import copy
from contextlib import contextmanager
from typing import Any, Iterator

from ..core import get_logger
from ..errors import BindingError, InvalidPath

logger = get_logger(__name__)

ROOT = "/"


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def _escape(segment: str) -> str:
    return segment.replace("~", "~0").replace("/", "~1")


def split_path(path: str) -> list[str]:
    """Split a path into unescaped segments; empty segments are dropped."""
    return [_unescape(segment) for segment in path.split("/") if segment]


def format_path(segments: list[str]) -> str:
    """Inverse of split_path."""
    return "/" + "/".join(_escape(segment) for segment in segments)


def join_path(base: str, *keys: str | int) -> str:
    """Append raw keys (escaped as needed) to an existing path."""
    return format_path(split_path(base) + [str(key) for key in keys])


def normalize_path(path: str) -> str:
    """Canonical form: leading slash, no empty or trailing segments."""
    return format_path(split_path(path))


def is_index(segment: str) -> bool:
    return segment.isascii() and segment.isdigit()


def _check_node(value: Any, path: str) -> None:
    if isinstance(value, (str, bool, int, float)):
        return
    if isinstance(value, list):
        for item in value:
            _check_node(item, path)
        return
    if isinstance(value, dict):
        for key, item in value.items():
            if not isinstance(key, str):
                raise BindingError(f"Map keys must be strings, got {type(key).__name__}", path=path)
            _check_node(item, path)
        return
    raise BindingError(f"Unsupported data value type {type(value).__name__}", path=path)


class DataModelStore:
    """
    Hierarchical data model for one surface.

    ``merge`` is the only mutation. Each successful merge records the written
    paths and all their ancestors so cached render output can be invalidated.

    Examples:
        >>> store = DataModelStore()
        >>> _ = store.merge("/user", {"name": "Alice"})
        >>> _ = store.merge("/user", {"age": 30})
        >>> store.get("/user")
        {'name': 'Alice', 'age': 30}
    """

    def __init__(self) -> None:
        self._root: dict[str, Any] = {}
        self._changed: set[str] = set()
        self._written: set[str] = set()
        self._version = 0

    @property
    def version(self) -> int:
        """Number of successful merges."""
        return self._version

    @property
    def changed_paths(self) -> frozenset[str]:
        """Paths whose reads went stale since the last drain."""
        return frozenset(self._changed)

    def drain_changes(self) -> set[str]:
        """Return pending changed paths and clear them."""
        changed = set(self._changed)
        self._changed.clear()
        self._written.clear()
        return changed

    def is_dirty(self, path: str) -> bool:
        """True if a read at ``path`` may differ since the last drain."""
        path = normalize_path(path)
        if path in self._changed:
            return True
        return any(path.startswith(written.rstrip("/") + "/") for written in self._written)

    def get(self, path: str) -> Any | None:
        """
        Read the node at ``path``.

        Returns:
            A copy of the node, or None when nothing is there (including paths
            that run through a scalar)
        """
        node = self._lookup(split_path(path))
        return copy.deepcopy(node) if node is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Copy of the whole tree."""
        return copy.deepcopy(self._root)

    def _lookup(self, segments: list[str]) -> Any | None:
        current: Any = self._root
        for segment in segments:
            if isinstance(current, dict):
                if segment not in current:
                    return None
                current = current[segment]
            elif isinstance(current, list):
                if not is_index(segment) or int(segment) >= len(current):
                    return None
                current = current[int(segment)]
            else:
                return None
        return current

    def merge(self, path: str, value: Any) -> Any | None:
        """
        Write ``value`` at ``path`` using the merge rule.

        Missing intermediate containers are created: an array when the next
        segment is an index, otherwise a map. Array indices may address an
        existing element or append at the end.

        Returns:
            Copy of the previous node at ``path`` (None if there was none)

        Raises:
            InvalidPath: Path runs through a scalar, uses a non-index segment
                on an array, skips past the end of an array, or writes a
                non-map at the root
            BindingError: Value is not a data node
        """
        _check_node(value, path)
        value = copy.deepcopy(value)
        segments = split_path(path)

        if not segments:
            if not isinstance(value, dict):
                raise InvalidPath("Root of the data model must be a map", path=ROOT)
            previous = copy.deepcopy(self._root)
            written = self._merge_map(self._root, value, [])
        else:
            previous, written = self._write(segments, value, path)

        self._record(written)
        self._version += 1
        logger.debug("data_model_merged", path=normalize_path(path), version=self._version)
        return previous

    def _write(self, segments: list[str], value: Any, path: str) -> tuple[Any, list[list[str]]]:
        created: tuple[Any, str | int] | None = None
        current: Any = self._root
        try:
            for position, segment in enumerate(segments[:-1]):
                next_is_index = is_index(segments[position + 1])
                child, key = self._step(current, segment, path)
                if child is None:
                    child = [] if next_is_index else {}
                    if isinstance(current, dict):
                        current[key] = child
                    else:
                        current.append(child)
                    if created is None:
                        created = (current, key)
                elif not isinstance(child, (dict, list)):
                    raise InvalidPath(
                        f"Segment {segment!r} of {path!r} is a scalar, not a container",
                        path=path,
                    )
                current = child

            existing, key = self._step(current, segments[-1], path)
        except InvalidPath:
            if created is not None:
                parent, key = created
                if isinstance(parent, dict):
                    del parent[key]
                else:
                    parent.pop()
            raise

        previous = copy.deepcopy(existing)
        if isinstance(existing, dict) and isinstance(value, dict):
            return previous, self._merge_map(existing, value, segments)

        if isinstance(current, dict):
            current[key] = value
        elif key == len(current):
            current.append(value)
        else:
            current[key] = value
        return previous, [segments]

    def _step(self, container: Any, segment: str, path: str) -> tuple[Any | None, str | int]:
        """Child of ``container`` at ``segment`` (None if absent but addressable)."""
        if isinstance(container, dict):
            return container.get(segment), segment
        if isinstance(container, list):
            if not is_index(segment):
                raise InvalidPath(f"Array segment {segment!r} in {path!r} is not an index", path=path)
            index = int(segment)
            if index > len(container):
                raise InvalidPath(
                    f"Index {index} in {path!r} is past the end of an array of {len(container)}",
                    path=path,
                )
            return (container[index] if index < len(container) else None), index
        raise InvalidPath(f"{path!r} runs through a scalar", path=path)

    def _merge_map(self, target: dict[str, Any], value: dict[str, Any], prefix: list[str]) -> list[list[str]]:
        written = [prefix]
        for key, item in value.items():
            existing = target.get(key)
            if isinstance(existing, dict) and isinstance(item, dict):
                written.extend(self._merge_map(existing, item, prefix + [key]))
            else:
                target[key] = item
                written.append(prefix + [key])
        return written

    def _record(self, written: list[list[str]]) -> None:
        for segments in written:
            self._written.add(format_path(segments))
            for depth in range(len(segments) + 1):
                self._changed.add(format_path(segments[:depth]))

    @contextmanager
    def transaction(self) -> Iterator["DataModelStore"]:
        """Apply several merges atomically: any exception restores the prior state."""
        saved = (copy.deepcopy(self._root), set(self._changed), set(self._written), self._version)
        try:
            yield self
        except BaseException:
            self._root, self._changed, self._written, self._version = saved
            raise

    def __repr__(self) -> str:
        return f"DataModelStore(version={self._version}, keys={list(self._root)})"
