"""
Descriptor types for enumgroup IR.

An EnumDescriptor is the parsed form of one grouped-enum declaration: the
detailed enum's name, the derived group enum's name, and the ordered groups
with their variants. The descriptor owns its groups and variants; they have
no existence outside it.

Collections are tuples, so a descriptor cannot change once constructed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .payload import PayloadShape

GROUP_ENUM_SUFFIX = "Group"


def normalize_decorators(decorators: Any) -> Any:
    """Strip surrounding space and a leading '@' from decorator expressions."""
    if not isinstance(decorators, list | tuple):
        return decorators
    normalized = []
    for decorator in decorators:
        if isinstance(decorator, str):
            decorator = decorator.strip().removeprefix("@").strip()
            if not decorator:
                raise ValueError("decorator expression is empty")
        normalized.append(decorator)
    return tuple(normalized)


class VariantSpec(BaseModel):
    """
    A single variant of the detailed enum.

    Attributes:
        name: Variant identifier (unique across the whole descriptor)
        payload: Payload shape carried by the variant
        group: Owning group name, bound by the enclosing GroupSpec
        decorators: Decorator expressions for the emitted variant class
        doc: Optional docstring for the emitted variant type
    """

    name: str
    payload: PayloadShape = Field(default_factory=PayloadShape)
    group: str | None = None
    decorators: tuple[str, ...] = ()
    doc: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("decorators", mode="before")
    @classmethod
    def _normalize_decorators(cls, value: Any) -> Any:
        return normalize_decorators(value)


class GroupSpec(BaseModel):
    """
    A named, ordered group of variants.

    Every variant is bound to this group on construction. A variant that
    already names a different owner is rejected: the partition is total and
    exclusive by construction. An empty group is constructible; the
    validator reports it.

    Attributes:
        name: Group identifier (unique within the descriptor)
        variants: Variants in declaration order
        destructure: Group handlers receive the payload instead of the variant
        doc: Optional docstring for the emitted group type
    """

    name: str
    variants: tuple[VariantSpec, ...] = ()
    destructure: bool = False
    doc: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _bind_variants(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        name = data.get("name")
        bound: list[Any] = []
        for variant in data.get("variants") or []:
            if isinstance(variant, VariantSpec):
                if variant.group is not None and variant.group != name:
                    raise ValueError(
                        f"variant '{variant.name}' belongs to group '{variant.group}', "
                        f"not '{name}'"
                    )
                bound.append(variant.model_copy(update={"group": name}))
            elif isinstance(variant, dict):
                owner = variant.get("group")
                if owner is not None and owner != name:
                    raise ValueError(
                        f"variant '{variant.get('name')}' belongs to group '{owner}', "
                        f"not '{name}'"
                    )
                bound.append({**variant, "group": name})
            else:
                bound.append(variant)
        return {**data, "variants": bound}

    def variant_names(self) -> list[str]:
        return [v.name for v in self.variants]

    def get_variant(self, name: str) -> VariantSpec | None:
        for variant in self.variants:
            if variant.name == name:
                return variant
        return None


class EnumDescriptor(BaseModel):
    """
    Root of a grouped-enum declaration.

    Attributes:
        name: Name of the detailed enum (e.g. 'Shape')
        group_enum: Name of the derived group enum (default '<name>Group')
        groups: Groups in declaration order
        imports: Import lines required by payload types and decorators
        decorators: Decorator expressions for the emitted detailed and group
            classes
        doc: Optional docstring for the emitted detailed type
    """

    name: str
    group_enum: str = ""
    groups: tuple[GroupSpec, ...] = ()
    imports: tuple[str, ...] = ()
    decorators: tuple[str, ...] = ()
    doc: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _default_group_enum(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("group_enum") and data.get("name"):
            return {**data, "group_enum": f"{data['name']}{GROUP_ENUM_SUFFIX}"}
        return data

    @field_validator("decorators", mode="before")
    @classmethod
    def _normalize_decorators(cls, value: Any) -> Any:
        return normalize_decorators(value)

    def group_names(self) -> list[str]:
        return [g.name for g in self.groups]

    def get_group(self, name: str) -> GroupSpec | None:
        """Get the first group declared under a name."""
        for group in self.groups:
            if group.name == name:
                return group
        return None

    def variants_of(self, group_name: str) -> list[VariantSpec]:
        """List the variants of a group, in declaration order."""
        group = self.get_group(group_name)
        if group is None:
            raise KeyError(group_name)
        return list(group.variants)

    def all_variants(self) -> list[VariantSpec]:
        """All variants across all groups, in declaration order."""
        return [v for g in self.groups for v in g.variants]

    def get_variant(self, name: str) -> VariantSpec | None:
        for group in self.groups:
            variant = group.get_variant(name)
            if variant is not None:
                return variant
        return None

    def payload_of(self, variant_name: str) -> PayloadShape:
        """Look up the declared payload shape of a variant."""
        variant = self.get_variant(variant_name)
        if variant is None:
            raise KeyError(variant_name)
        return variant.payload
