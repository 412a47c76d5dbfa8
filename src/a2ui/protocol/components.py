"""Component definitions for the standard catalog.

A surface is a flat adjacency list: containers name their children by id
(explicit list or template) instead of nesting them. Each component type is a
closed pydantic model selected by its ``type`` tag; any other tag is rejected.
"""

from enum import Enum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictStr,
    TypeAdapter,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .values import LiteralString, ValueRef


class ComponentType(str, Enum):
    """Standard catalog component types."""

    COLUMN = "Column"
    ROW = "Row"
    CARD = "Card"
    LIST = "List"
    TEXT = "Text"
    IMAGE = "Image"
    BUTTON = "Button"
    TEXT_FIELD = "TextField"
    CHECK_BOX = "CheckBox"
    SLIDER = "Slider"


class ValueKind(str, Enum):
    """Expected kind of a resolved property value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"


class _Spec(BaseModel):
    model_config = ConfigDict(
        frozen=True, populate_by_name=True, alias_generator=to_camel, extra="ignore"
    )


# ============================================================================
# Children
# ============================================================================


class ExplicitList(_Spec):
    """Fixed, ordered child ids."""

    ids: list[StrictStr] = Field(default_factory=list)


class Template(_Spec):
    """One instance of ``component_id`` per element of the array at ``data_binding``."""

    component_id: StrictStr
    data_binding: StrictStr


def _select_children(data: Any) -> Any:
    if isinstance(data, (ExplicitList, Template)):
        return data
    if not isinstance(data, dict):
        raise ValueError("children must be an object")

    present = [key for key in ("explicitList", "template") if key in data]
    if len(present) != 1:
        raise ValueError("children needs exactly one of explicitList, template")
    if present[0] == "explicitList":
        return ExplicitList(ids=data["explicitList"])
    return Template.model_validate(data["template"])


ChildrenRef = Annotated[Union[ExplicitList, Template], BeforeValidator(_select_children)]


# ============================================================================
# Actions
# ============================================================================


class ActionContextEntry(_Spec):
    """Named value sent with an action, resolved when the action fires."""

    key: StrictStr
    value: ValueRef


class ActionDefinition(_Spec):
    """Action a Button triggers."""

    name: StrictStr
    context: list[ActionContextEntry] = Field(default_factory=list)


# ============================================================================
# Components
# ============================================================================


class ComponentBase(_Spec):
    """Fields shared by every component."""

    id: StrictStr = Field(min_length=1)
    weight: float | None = None

    # Property holding a two-way binding, if any
    bindable: ClassVar[str | None] = None
    # Expected resolved kind per value-reference property
    value_kinds: ClassVar[dict[str, ValueKind]] = {}

    @field_validator("weight", mode="before")
    @classmethod
    def _lenient_weight(cls, v: Any) -> Any:
        # Non-numeric weights from LLM output are dropped, not rejected
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        return v

    def child_ids(self) -> list[str]:
        """Ids this component refers to directly (children, child, template)."""
        children = getattr(self, "children", None)
        if isinstance(children, ExplicitList):
            return list(children.ids)
        if isinstance(children, Template):
            return [children.component_id]
        child = getattr(self, "child", None)
        return [child] if child else []

    def properties(self) -> dict[str, Any]:
        """Type-specific properties (everything except identity and layout weight)."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name not in ("id", "type", "weight")
        }


class Column(ComponentBase):
    type: Literal["Column"] = "Column"
    children: ChildrenRef = Field(default_factory=ExplicitList)
    alignment: str | None = None
    distribution: str | None = None


class Row(ComponentBase):
    type: Literal["Row"] = "Row"
    children: ChildrenRef = Field(default_factory=ExplicitList)
    alignment: str | None = None
    distribution: str | None = None


class List(ComponentBase):
    type: Literal["List"] = "List"
    children: ChildrenRef = Field(default_factory=ExplicitList)
    direction: str | None = None


class Card(ComponentBase):
    type: Literal["Card"] = "Card"
    child: StrictStr
    elevation: int | None = None


class Text(ComponentBase):
    type: Literal["Text"] = "Text"
    text: ValueRef = Field(default_factory=lambda: LiteralString(value=""))
    usage_hint: str | None = None

    value_kinds: ClassVar[dict[str, ValueKind]] = {"text": ValueKind.STRING}


class Image(ComponentBase):
    type: Literal["Image"] = "Image"
    url: ValueRef
    fit: str | None = None
    usage_hint: str | None = None

    value_kinds: ClassVar[dict[str, ValueKind]] = {"url": ValueKind.STRING}


class Button(ComponentBase):
    type: Literal["Button"] = "Button"
    child: StrictStr
    primary: bool = False
    action: ActionDefinition | None = None


class TextField(ComponentBase):
    type: Literal["TextField"] = "TextField"
    text: ValueRef
    label: ValueRef | None = None
    placeholder: ValueRef | None = None
    input_type: str | None = None

    bindable: ClassVar[str | None] = "text"
    value_kinds: ClassVar[dict[str, ValueKind]] = {
        "text": ValueKind.STRING,
        "label": ValueKind.STRING,
        "placeholder": ValueKind.STRING,
    }


class CheckBox(ComponentBase):
    type: Literal["CheckBox"] = "CheckBox"
    value: ValueRef
    label: ValueRef | None = None

    bindable: ClassVar[str | None] = "value"
    value_kinds: ClassVar[dict[str, ValueKind]] = {
        "value": ValueKind.BOOLEAN,
        "label": ValueKind.STRING,
    }


class Slider(ComponentBase):
    type: Literal["Slider"] = "Slider"
    value: ValueRef
    min: float | None = None
    max: float | None = None
    step: float | None = None

    bindable: ClassVar[str | None] = "value"
    value_kinds: ClassVar[dict[str, ValueKind]] = {"value": ValueKind.NUMBER}


ComponentDefinition = Annotated[
    Union[Column, Row, List, Card, Text, Image, Button, TextField, CheckBox, Slider],
    Field(discriminator="type"),
]

COMPONENT_TYPES: dict[str, type[ComponentBase]] = {
    ComponentType.COLUMN.value: Column,
    ComponentType.ROW.value: Row,
    ComponentType.CARD.value: Card,
    ComponentType.LIST.value: List,
    ComponentType.TEXT.value: Text,
    ComponentType.IMAGE.value: Image,
    ComponentType.BUTTON.value: Button,
    ComponentType.TEXT_FIELD.value: TextField,
    ComponentType.CHECK_BOX.value: CheckBox,
    ComponentType.SLIDER.value: Slider,
}

_component_adapter: TypeAdapter[ComponentDefinition] = TypeAdapter(ComponentDefinition)


def flatten_component(entry: Any) -> dict[str, Any]:
    """
    Convert a wire entry ``{id, component: {Type: {...}}, weight?}`` into the
    flat ``{id, type, weight, **properties}`` form validated by the models.

    Raises:
        ValueError: If the entry does not carry exactly one known type tag
    """
    if not isinstance(entry, dict):
        raise ValueError("component entry must be an object")
    body = entry.get("component")
    if not isinstance(body, dict) or len(body) != 1:
        raise ValueError(f"component {entry.get('id')!r} must name exactly one type")

    (type_name, props), = body.items()
    if type_name not in COMPONENT_TYPES:
        raise ValueError(f"unknown component type {type_name!r}")
    if props is None:
        props = {}
    if not isinstance(props, dict):
        raise ValueError(f"properties of {type_name} must be an object")

    return {**props, "id": entry.get("id"), "type": type_name, "weight": entry.get("weight")}


def component_from_wire(entry: Any) -> ComponentDefinition:
    """
    Build a typed component from its wire entry.

    Raises:
        ValueError: Unknown type or bad shape
        pydantic.ValidationError: Property schema violation
    """
    return _component_adapter.validate_python(flatten_component(entry))
