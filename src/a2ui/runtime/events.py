"""Events emitted while applying protocol messages."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class SurfaceCreated:
    surface_id: str
    root: str


@dataclass(frozen=True)
class ComponentsUpdated:
    surface_id: str
    component_ids: tuple[str, ...]


@dataclass(frozen=True)
class DataModelUpdated:
    surface_id: str
    # Paths whose reads went stale since the last event, this update included
    paths: tuple[str, ...]


@dataclass(frozen=True)
class SurfaceDeleted:
    surface_id: str


ProcessorEvent = Union[SurfaceCreated, ComponentsUpdated, DataModelUpdated, SurfaceDeleted]
