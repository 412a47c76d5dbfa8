"""
A2UI protocol layer
Typed messages, components and value references, plus the JSON parser
"""

from .values import (
    LiteralBoolean,
    LiteralNumber,
    LiteralRef,
    LiteralString,
    PathRef,
    ValueRef,
    is_literal,
    literal,
    path_ref,
)
from .components import (
    COMPONENT_TYPES,
    ActionContextEntry,
    ActionDefinition,
    ComponentBase,
    ComponentDefinition,
    ComponentType,
    ExplicitList,
    Template,
    ValueKind,
    component_from_wire,
)
from .messages import (
    MESSAGE_TYPES,
    BeginRendering,
    DataEntry,
    DataModelUpdate,
    DataNode,
    DeleteSurface,
    InboundMessage,
    SurfaceUpdate,
    UserAction,
    decode_value,
    encode_value,
)
from .parser import MessageParser, parse_messages, validate_message

__all__ = [
    "LiteralBoolean",
    "LiteralNumber",
    "LiteralRef",
    "LiteralString",
    "PathRef",
    "ValueRef",
    "is_literal",
    "literal",
    "path_ref",
    "COMPONENT_TYPES",
    "ActionContextEntry",
    "ActionDefinition",
    "ComponentBase",
    "ComponentDefinition",
    "ComponentType",
    "ExplicitList",
    "Template",
    "ValueKind",
    "component_from_wire",
    "MESSAGE_TYPES",
    "BeginRendering",
    "DataEntry",
    "DataModelUpdate",
    "DataNode",
    "DeleteSurface",
    "InboundMessage",
    "SurfaceUpdate",
    "UserAction",
    "decode_value",
    "encode_value",
    "MessageParser",
    "parse_messages",
    "validate_message",
]
