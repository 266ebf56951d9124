"""
Group partitioning for validated descriptors.

Derives the variant -> group and group -> variants maps every generator
reads. The index is rebuilt from the descriptor on demand and never mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from . import ir
from .errors import PreconditionError
from .validator import ValidatedDescriptor


@dataclass(frozen=True)
class PartitionIndex:
    """
    Read-only view of a descriptor's partition.

    Attributes:
        enum_name: Detailed enum name
        group_enum: Group enum name
        group_by_variant: Variant name -> owning group name
        variants_by_group: Group name -> variant names in declaration order
    """

    enum_name: str
    group_enum: str
    group_by_variant: MappingProxyType[str, str]
    variants_by_group: MappingProxyType[str, tuple[str, ...]]

    @property
    def groups(self) -> tuple[str, ...]:
        """Group names in declaration order."""
        return tuple(self.variants_by_group)

    @property
    def variants(self) -> tuple[str, ...]:
        """Variant names in declaration order."""
        return tuple(self.group_by_variant)

    def group_of(self, variant: str) -> str:
        return self.group_by_variant[variant]

    def variants_of(self, group: str) -> tuple[str, ...]:
        return self.variants_by_group[group]

    def describes(self, descriptor: ir.EnumDescriptor) -> bool:
        """Check that this index was built from a descriptor with the same partition."""
        return (
            self.enum_name == descriptor.name
            and self.group_enum == descriptor.group_enum
            and self.groups == tuple(descriptor.group_names())
            and self.variants == tuple(v.name for v in descriptor.all_variants())
            and all(
                self.variants_by_group[group.name] == tuple(group.variant_names())
                for group in descriptor.groups
            )
        )


def partition(validated: Any) -> PartitionIndex:
    """
    Build the partition index for a validated descriptor.

    Args:
        validated: Result of ``ensure_valid``

    Returns:
        PartitionIndex preserving declaration order

    Raises:
        PreconditionError: If given anything but a ValidatedDescriptor
    """
    if not isinstance(validated, ValidatedDescriptor):
        raise PreconditionError(
            f"partition() requires a ValidatedDescriptor, got {type(validated).__name__}; "
            "call ensure_valid() first"
        )

    descriptor = validated.descriptor
    group_by_variant: dict[str, str] = {}
    variants_by_group: dict[str, tuple[str, ...]] = {}
    for group in descriptor.groups:
        variants_by_group[group.name] = tuple(group.variant_names())
        for name in group.variant_names():
            group_by_variant[name] = group.name

    return PartitionIndex(
        enum_name=descriptor.name,
        group_enum=descriptor.group_enum,
        group_by_variant=MappingProxyType(group_by_variant),
        variants_by_group=MappingProxyType(variants_by_group),
    )
