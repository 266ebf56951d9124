"""
Abstract declaration records produced by the code generator.

The generator never emits text. It returns an ordered list of declarations
(types, the group enum, and functions whose bodies are dispatch tables) that
an emission adapter serializes for its target.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .payload import PayloadShape


class Artifact(StrEnum):
    """Separable units of generated output, in emission order."""

    TYPES = "types"
    GROUP_ENUM = "group_enum"
    GROUP_OF = "group_of"
    VARIANTS_OF = "variants_of"
    PREDICATES = "predicates"
    MATCH_GROUP = "match_group"
    DISPATCH = "dispatch"


class DeclarationKind(StrEnum):
    DETAILED_TYPE = "detailed_type"
    GROUP_TYPE = "group_type"
    VARIANT_TYPE = "variant_type"
    GROUP_ENUM = "group_enum"
    FUNCTION = "function"


class FunctionKind(StrEnum):
    GROUP_OF = "group_of"
    VARIANTS_OF = "variants_of"
    PREDICATE = "predicate"
    MATCH_GROUP = "match_group"
    DISPATCH = "dispatch"


class TableKey(StrEnum):
    """What a dispatch table is keyed on."""

    VARIANT = "variant"
    GROUP = "group"


class ParamRole(StrEnum):
    VALUE = "value"  # a detailed-enum value
    GROUP = "group"  # a group enum member
    HANDLER = "handler"  # a callable receiving one group's values


class DetailedTypeDecl(BaseModel):
    """Base type of every variant (the detailed enum)."""

    kind: Literal[DeclarationKind.DETAILED_TYPE] = DeclarationKind.DETAILED_TYPE
    artifact: Artifact = Artifact.TYPES
    name: str
    decorators: list[str] = Field(default_factory=list)
    doc: str | None = None

    model_config = ConfigDict(frozen=True)


class GroupTypeDecl(BaseModel):
    """Base type shared by the variants of one group."""

    kind: Literal[DeclarationKind.GROUP_TYPE] = DeclarationKind.GROUP_TYPE
    artifact: Artifact = Artifact.TYPES
    name: str
    base: str
    variants: list[str] = Field(default_factory=list)
    decorators: list[str] = Field(default_factory=list)
    doc: str | None = None

    model_config = ConfigDict(frozen=True)


class VariantTypeDecl(BaseModel):
    """A concrete variant type with its payload."""

    kind: Literal[DeclarationKind.VARIANT_TYPE] = DeclarationKind.VARIANT_TYPE
    artifact: Artifact = Artifact.TYPES
    name: str
    base: str
    payload: PayloadShape = Field(default_factory=PayloadShape)
    decorators: list[str] = Field(default_factory=list)
    doc: str | None = None

    model_config = ConfigDict(frozen=True)


class GroupEnumDecl(BaseModel):
    """The group enum: one payload-free member per group, in order."""

    kind: Literal[DeclarationKind.GROUP_ENUM] = DeclarationKind.GROUP_ENUM
    artifact: Artifact = Artifact.GROUP_ENUM
    name: str
    members: list[str]
    doc: str | None = None

    model_config = ConfigDict(frozen=True)


class Parameter(BaseModel):
    """
    A function parameter.

    Attributes:
        name: Parameter name
        role: What the parameter carries
        type_ref: Declared type it refers to (detailed enum, group enum or group)
        keyword_only: Parameter must be passed by keyword
    """

    name: str
    role: ParamRole
    type_ref: str
    keyword_only: bool = False

    model_config = ConfigDict(frozen=True)


class DispatchArm(BaseModel):
    """
    One row of a dispatch table.

    Attributes:
        match: Variant or group name this row matches (see TableKey)
        targets: Resulting group member(s) or variant type(s)
        handler: Handler parameter name or 'module:attribute' reference
        destructure: Payload shape to unpack before calling the handler
    """

    match: str
    targets: list[str] = Field(default_factory=list)
    handler: str | None = None
    destructure: PayloadShape | None = None

    model_config = ConfigDict(frozen=True)


class DispatchTable(BaseModel):
    key: TableKey
    arms: list[DispatchArm] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def matches(self) -> list[str]:
        return [arm.match for arm in self.arms]

    def arm_for(self, match: str) -> DispatchArm | None:
        for arm in self.arms:
            if arm.match == match:
                return arm
        return None


class FunctionDecl(BaseModel):
    """
    A generated function: name, signature, and a dispatch-table body.

    Attributes:
        name: Function name
        function: Which helper this is
        params: Parameters in order
        returns: Declared return type reference ('bool', a declared type, ...)
        table: Dispatch table the body evaluates
        artifact: Artifact this function belongs to
        doc: Optional docstring
    """

    kind: Literal[DeclarationKind.FUNCTION] = DeclarationKind.FUNCTION
    artifact: Artifact
    name: str
    function: FunctionKind
    params: list[Parameter] = Field(default_factory=list)
    returns: str
    table: DispatchTable
    doc: str | None = None

    model_config = ConfigDict(frozen=True)


Declaration = Annotated[
    DetailedTypeDecl | GroupTypeDecl | VariantTypeDecl | GroupEnumDecl | FunctionDecl,
    Field(discriminator="kind"),
]


class GeneratedModule(BaseModel):
    """
    Output of one generation pass.

    Attributes:
        enum_name: Detailed enum the declarations derive from
        group_enum: Name of the group enum
        imports: Import lines payload annotations need
        declarations: Declarations in emission order
    """

    enum_name: str
    group_enum: str
    imports: list[str] = Field(default_factory=list)
    declarations: list[Declaration] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def names(self) -> list[str]:
        return [d.name for d in self.declarations]

    def get(self, name: str) -> Declaration | None:
        for declaration in self.declarations:
            if declaration.name == name:
                return declaration
        return None

    def functions(self) -> list[FunctionDecl]:
        return [d for d in self.declarations if isinstance(d, FunctionDecl)]

    def artifacts(self) -> list[Artifact]:
        """Artifacts present, in first-appearance order."""
        seen: list[Artifact] = []
        for declaration in self.declarations:
            if declaration.artifact not in seen:
                seen.append(declaration.artifact)
        return seen
