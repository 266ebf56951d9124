"""
Payload shapes for enumgroup IR.

A variant carries no payload, a single value, or an ordered list of named
fields. Type names are opaque annotation strings; they are passed through
to the emitted code untouched.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, model_validator

# Attribute holding a single-type payload on the emitted variant class.
SINGLE_VALUE_ATTRIBUTE = "value"


class PayloadKind(StrEnum):
    """Kinds of variant payloads."""

    UNIT = "unit"
    SINGLE = "single"
    FIELDS = "fields"


class PayloadField(BaseModel):
    """
    A named field in a ``fields`` payload.

    Attributes:
        name: Field name (becomes a dataclass attribute)
        type_name: Type annotation, e.g. 'float', 'list[str]', 'MsgA'
    """

    name: str
    type_name: str

    model_config = ConfigDict(frozen=True)


class PayloadShape(BaseModel):
    """
    Payload shape of a variant.

    Examples:
        - Circle:            PayloadShape(kind=UNIT)
        - Circle(float):     PayloadShape(kind=SINGLE, type_name="float")
        - Ellipse(a, b):     PayloadShape(kind=FIELDS, fields=(...))
    """

    kind: PayloadKind = PayloadKind.UNIT
    type_name: str | None = None
    fields: tuple[PayloadField, ...] = ()

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_kind(self) -> PayloadShape:
        if self.kind == PayloadKind.UNIT:
            if self.type_name is not None or self.fields:
                raise ValueError("unit payload cannot carry a type or fields")
        elif self.kind == PayloadKind.SINGLE:
            if not self.type_name or self.fields:
                raise ValueError("single payload needs exactly one type and no fields")
        else:
            if self.type_name is not None:
                raise ValueError("fields payload cannot carry a single type")
            if not self.fields:
                raise ValueError("fields payload needs at least one field")
            names = [f.name for f in self.fields]
            duplicates = sorted({name for name in names if names.count(name) > 1})
            if duplicates:
                raise ValueError(f"duplicate payload field names: {', '.join(duplicates)}")
        return self

    @classmethod
    def unit(cls) -> PayloadShape:
        return cls()

    @classmethod
    def single(cls, type_name: str) -> PayloadShape:
        return cls(kind=PayloadKind.SINGLE, type_name=type_name)

    @classmethod
    def of_fields(cls, *fields: tuple[str, str]) -> PayloadShape:
        """Build a fields payload from ``(name, type_name)`` pairs."""
        payload_fields = tuple(
            PayloadField(name=name, type_name=type_name) for name, type_name in fields
        )
        return cls(kind=PayloadKind.FIELDS, fields=payload_fields)

    @property
    def attribute_names(self) -> list[str]:
        """Attribute names the emitted variant class carries, in order."""
        if self.kind == PayloadKind.SINGLE:
            return [SINGLE_VALUE_ATTRIBUTE]
        return [f.name for f in self.fields]

    def signature(self) -> tuple[str, tuple[tuple[str, str], ...]]:
        """Comparable signature; equal signatures mean compatible shapes."""
        if self.kind == PayloadKind.SINGLE:
            return (self.kind.value, (("", self.type_name or ""),))
        return (self.kind.value, tuple((f.name, f.type_name) for f in self.fields))

    def is_compatible(self, other: PayloadShape) -> bool:
        return self.signature() == other.signature()

    def describe(self) -> str:
        """Human-readable form used in diagnostics: '()', '(float)', '(a: float)'."""
        if self.kind == PayloadKind.UNIT:
            return "()"
        if self.kind == PayloadKind.SINGLE:
            return f"({self.type_name})"
        return "(" + ", ".join(f"{f.name}: {f.type_name}" for f in self.fields) + ")"
