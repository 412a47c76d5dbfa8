"""Protocol message types.

Inbound (producer → runtime): beginRendering, surfaceUpdate,
dataModelUpdate, deleteSurface. Outbound (runtime → controller): userAction.
"""

from datetime import datetime, timezone
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, StrictStr, field_validator
from pydantic.alias_generators import to_camel

from ..core.id import new_action_id
from .components import ComponentDefinition

DataNode = Union[str, int, float, bool, list["DataNode"], dict[str, "DataNode"]]

_VALUE_KEYS = ("valueString", "valueNumber", "valueBoolean", "valueArray", "valueMap")


class _Message(BaseModel):
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="ignore"
    )

    surface_id: StrictStr = Field(min_length=1)


class BeginRendering(_Message):
    """Create a surface and fix its root component."""

    root: StrictStr = Field(min_length=1)
    styles: dict[str, Any] | None = None


class SurfaceUpdate(_Message):
    """Batch upsert of component definitions."""

    components: list[ComponentDefinition] = Field(default_factory=list)


class DataEntry(BaseModel):
    """Decoded ``{key, value*}`` entry of a dataModelUpdate."""

    model_config = ConfigDict(frozen=True)

    key: StrictStr = Field(min_length=1)
    value: Any


class DataModelUpdate(_Message):
    """Merge keyed values under ``path``."""

    path: StrictStr = "/"
    contents: list[DataEntry] = Field(default_factory=list)

    @field_validator("contents", mode="before")
    @classmethod
    def _decode_contents(cls, v: Any) -> Any:
        if not isinstance(v, list):
            raise ValueError("contents must be a list")
        entries = []
        for entry in v:
            if not isinstance(entry, DataEntry):
                entry = DataEntry(key=_entry_key(entry), value=decode_value(entry))
            entries.append(entry)
        return entries


class DeleteSurface(_Message):
    """Tear a surface down."""


class UserAction(BaseModel):
    """Action emitted to the controller when a user interacts with a surface."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: str = Field(default_factory=new_action_id)
    surface_id: str
    component_id: str | None = None
    name: str
    context: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def to_wire(self) -> dict[str, Any]:
        """``{"userAction": {...}}`` envelope for the controller."""
        return {"userAction": self.model_dump(mode="json", by_alias=True)}


InboundMessage = Union[BeginRendering, SurfaceUpdate, DataModelUpdate, DeleteSurface]

MESSAGE_TYPES: dict[str, type[_Message]] = {
    "beginRendering": BeginRendering,
    "surfaceUpdate": SurfaceUpdate,
    "dataModelUpdate": DataModelUpdate,
    "deleteSurface": DeleteSurface,
}


def _entry_key(entry: Any) -> str:
    if not isinstance(entry, dict):
        raise ValueError("data entry must be an object")
    key = entry.get("key")
    if not isinstance(key, str) or not key:
        raise ValueError("data entry needs a non-empty string key")
    return key


def decode_value(item: Any) -> DataNode:
    """
    Decode one typed wire value into a plain data node.

    ``valueMap`` holds keyed entries, ``valueArray`` holds unkeyed typed values.

    Raises:
        ValueError: If not exactly one value variant is present, or its
            payload has the wrong type
    """
    if not isinstance(item, dict):
        raise ValueError("data value must be an object")

    present = [key for key in _VALUE_KEYS if key in item]
    if len(present) != 1:
        found = ", ".join(present) if present else "none"
        raise ValueError(f"data value needs exactly one of {', '.join(_VALUE_KEYS)} (found: {found})")

    kind = present[0]
    raw = item[kind]
    if kind == "valueString":
        if not isinstance(raw, str):
            raise ValueError("valueString must be a string")
        return raw
    if kind == "valueNumber":
        if isinstance(raw, bool) or not isinstance(raw, (int, float)):
            raise ValueError("valueNumber must be a number")
        return raw
    if kind == "valueBoolean":
        if not isinstance(raw, bool):
            raise ValueError("valueBoolean must be a boolean")
        return raw
    if kind == "valueArray":
        if not isinstance(raw, list):
            raise ValueError("valueArray must be a list")
        return [decode_value(element) for element in raw]

    if not isinstance(raw, list):
        raise ValueError("valueMap must be a list of keyed entries")
    result: dict[str, DataNode] = {}
    for entry in raw:
        result[_entry_key(entry)] = decode_value(entry)
    return result


def encode_value(node: DataNode) -> dict[str, Any]:
    """Inverse of decode_value, for producers and tests building messages."""
    if isinstance(node, bool):
        return {"valueBoolean": node}
    if isinstance(node, (int, float)):
        return {"valueNumber": node}
    if isinstance(node, str):
        return {"valueString": node}
    if isinstance(node, list):
        return {"valueArray": [encode_value(element) for element in node]}
    if isinstance(node, dict):
        return {"valueMap": [{"key": key, **encode_value(value)} for key, value in node.items()]}
    raise TypeError(f"cannot encode {type(node).__name__} as a data value")
