"""Surface runtime: data model, component graph, rendering and actions."""

from .actions import ActionDispatcher, ActionSink
from .data_model import DataModelStore, join_path, normalize_path, split_path
from .events import (
    ComponentsUpdated,
    DataModelUpdated,
    ProcessorEvent,
    SurfaceCreated,
    SurfaceDeleted,
)
from .graph import ComponentGraph
from .registry import SurfaceRegistry
from .render import PLACEHOLDER, RenderIssue, RenderNode, RenderSnapshot, TreeBuilder
from .resolver import ROOT_SCOPE, Scope, ValueResolver
from .surface import Surface, SurfaceState
from .template import ChildInstance, TemplateExpander

__all__ = [
    "ActionDispatcher",
    "ActionSink",
    "DataModelStore",
    "join_path",
    "normalize_path",
    "split_path",
    "ComponentsUpdated",
    "DataModelUpdated",
    "ProcessorEvent",
    "SurfaceCreated",
    "SurfaceDeleted",
    "ComponentGraph",
    "SurfaceRegistry",
    "PLACEHOLDER",
    "RenderIssue",
    "RenderNode",
    "RenderSnapshot",
    "TreeBuilder",
    "ROOT_SCOPE",
    "Scope",
    "ValueResolver",
    "Surface",
    "SurfaceState",
    "ChildInstance",
    "TemplateExpander",
]
