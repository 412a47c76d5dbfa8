"""Value references: a literal constant or a data-model path.

Wire shape is an object with exactly one of ``literalString``,
``literalNumber``, ``literalBoolean`` or ``path``.
"""

from typing import Annotated, Any, Union

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
)


class _Reference(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class LiteralString(_Reference):
    """Embedded string constant."""

    value: StrictStr = Field(alias="literalString")


class LiteralNumber(_Reference):
    """Embedded number constant."""

    value: StrictInt | StrictFloat = Field(alias="literalNumber")


class LiteralBoolean(_Reference):
    """Embedded boolean constant."""

    value: StrictBool = Field(alias="literalBoolean")


class PathRef(_Reference):
    """Reference into the data model.

    A leading ``/`` makes the path absolute; anything else is relative to the
    template element in scope (or the root outside templates).
    """

    path: StrictStr

    @property
    def is_absolute(self) -> bool:
        return self.path.startswith("/")


LiteralRef = LiteralString | LiteralNumber | LiteralBoolean

_VARIANTS: dict[str, type[_Reference]] = {
    "literalString": LiteralString,
    "literalNumber": LiteralNumber,
    "literalBoolean": LiteralBoolean,
    "path": PathRef,
}


def _select_variant(data: Any) -> Any:
    if isinstance(data, _Reference):
        return data
    if not isinstance(data, dict):
        raise ValueError(f"value reference must be an object, got {type(data).__name__}")

    present = [key for key in _VARIANTS if key in data]
    if len(present) != 1:
        found = ", ".join(present) if present else "none"
        raise ValueError(
            f"value reference needs exactly one of {', '.join(_VARIANTS)} (found: {found})"
        )
    key = present[0]
    return _VARIANTS[key].model_validate({key: data[key]})


ValueRef = Annotated[
    Union[LiteralString, LiteralNumber, LiteralBoolean, PathRef],
    BeforeValidator(_select_variant),
]


def literal(value: str | int | float | bool) -> LiteralString | LiteralNumber | LiteralBoolean:
    """Build the literal reference matching a Python value."""
    # bool first: bool is an int subclass
    if isinstance(value, bool):
        return LiteralBoolean(value=value)
    if isinstance(value, (int, float)):
        return LiteralNumber(value=value)
    if isinstance(value, str):
        return LiteralString(value=value)
    raise TypeError(f"no literal reference for {type(value).__name__}")


def path_ref(p: str) -> PathRef:
    """Build a path reference."""
    return PathRef(path=p)


def is_literal(ref: Any) -> bool:
    return isinstance(ref, (LiteralString, LiteralNumber, LiteralBoolean))
