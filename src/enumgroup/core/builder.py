"""
Fluent builder for EnumDescriptor.

Front-ends and tests assemble descriptors through this instead of nesting
model constructors by hand:

    descriptor = (
        DescriptorBuilder("Shape")
        .group("Round")
        .variant("Circle", "float")
        .variant("Ellipse", {"major": "float", "minor": "float"})
        .group("Angular")
        .variant("Square")
        .build()
    )
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

from . import ir

PayloadInput = ir.PayloadShape | str | Mapping[str, str] | None


def coerce_payload(payload: PayloadInput) -> ir.PayloadShape:
    """
    Turn shorthand payload input into a PayloadShape.

    None -> unit, a type name -> single, a mapping -> ordered fields.
    Textual field lists ('a: int, b: str') are the loader's job.
    """
    if payload is None:
        return ir.PayloadShape.unit()
    if isinstance(payload, ir.PayloadShape):
        return payload
    if isinstance(payload, str):
        return ir.PayloadShape.single(payload)
    return ir.PayloadShape.of_fields(*payload.items())


@dataclass
class _PendingGroup:
    name: str
    destructure: bool = False
    doc: str | None = None
    variants: list[ir.VariantSpec] = field(default_factory=list)


class DescriptorBuilder:
    """Accumulate groups and variants, then build an immutable descriptor."""

    def __init__(
        self,
        name: str,
        group_enum: str | None = None,
        doc: str | None = None,
        decorators: Sequence[str] = (),
    ) -> None:
        self._name = name
        self._group_enum = group_enum
        self._doc = doc
        self._decorators = tuple(decorators)
        self._imports: list[str] = []
        self._groups: list[_PendingGroup] = []

    def group(
        self, name: str, destructure: bool = False, doc: str | None = None
    ) -> DescriptorBuilder:
        """Open a new group; following variants belong to it."""
        self._groups.append(_PendingGroup(name=name, destructure=destructure, doc=doc))
        return self

    def variant(
        self,
        name: str,
        payload: PayloadInput = None,
        doc: str | None = None,
        decorators: Sequence[str] = (),
    ) -> DescriptorBuilder:
        """Add a variant to the most recently opened group."""
        if not self._groups:
            raise ValueError(f"variant '{name}' declared before any group")
        self._groups[-1].variants.append(
            ir.VariantSpec(
                name=name,
                payload=coerce_payload(payload),
                decorators=tuple(decorators),
                doc=doc,
            )
        )
        return self

    def imports(self, *lines: str) -> DescriptorBuilder:
        self._imports.extend(lines)
        return self

    def build(self) -> ir.EnumDescriptor:
        return ir.EnumDescriptor(
            name=self._name,
            group_enum=self._group_enum or "",
            doc=self._doc,
            imports=tuple(self._imports),
            decorators=self._decorators,
            groups=tuple(
                ir.GroupSpec(
                    name=g.name,
                    variants=tuple(g.variants),
                    destructure=g.destructure,
                    doc=g.doc,
                )
                for g in self._groups
            ),
        )
