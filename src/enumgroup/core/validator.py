"""
Structural validation for enumgroup descriptors.

Every rule runs on every descriptor; nothing short-circuits. Issues are
reported grouped by rule in a fixed order so the same descriptor always
produces the same diagnostics, in the same sequence.
"""

from __future__ import annotations

import ast
import logging
from collections import Counter
from collections.abc import Callable

from pydantic import BaseModel, ConfigDict, model_validator

from . import ir
from .errors import ValidationError
from .naming import (
    RESERVED_HANDLER_PARAMS,
    RESERVED_HELPER_NAMES,
    RESERVED_MODULE_NAMES,
    handler_param,
    is_identifier,
    predicate_name,
)

logger = logging.getLogger(__name__)

Rule = Callable[[ir.EnumDescriptor], list[ir.ValidationIssue]]


def _issue(
    descriptor: ir.EnumDescriptor,
    rule: ir.ValidationRule,
    message: str,
    group: str | None = None,
    variant: str | None = None,
) -> ir.ValidationIssue:
    return ir.ValidationIssue(
        rule=rule,
        message=message,
        enum_name=descriptor.name,
        group=group,
        variant=variant,
    )


def _quoted(names: list[str]) -> str:
    return ", ".join(f"'{name}'" for name in names)


def validate_duplicate_variants(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """One issue per variant name declared more than once, anywhere."""
    owners: dict[str, list[str]] = {}
    for group in descriptor.groups:
        for variant in group.variants:
            owners.setdefault(variant.name, []).append(group.name)

    issues = []
    for name, groups in owners.items():
        if len(groups) > 1:
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.DUPLICATE_VARIANT,
                    f"Variant '{name}' is declared {len(groups)} times "
                    f"(in groups {_quoted(groups)})",
                    group=groups[0],
                    variant=name,
                )
            )
    return issues


def validate_duplicate_groups(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """One issue per group name declared more than once."""
    counts = Counter(descriptor.group_names())
    issues = []
    for name, count in counts.items():
        if count > 1:
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.DUPLICATE_GROUP,
                    f"Group '{name}' is declared {count} times",
                    group=name,
                )
            )
    return issues


def validate_empty_groups(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    return [
        _issue(
            descriptor,
            ir.ValidationRule.EMPTY_GROUP,
            f"Group '{group.name}' has no variants",
            group=group.name,
        )
        for group in descriptor.groups
        if not group.variants
    ]


def validate_name_collisions(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """
    Check that the enum, group enum, group and variant names are distinct.

    Only clashes between different kinds of names count here; repeats
    within one kind are reported as duplicates.
    """
    kinds_by_name: dict[str, list[str]] = {}

    def claim(name: str, kind: str) -> None:
        kinds = kinds_by_name.setdefault(name, [])
        if kind not in kinds:
            kinds.append(kind)

    claim(descriptor.name, "detailed enum")
    claim(descriptor.group_enum, "group enum")
    for group in descriptor.groups:
        claim(group.name, "group")
    for variant in descriptor.all_variants():
        claim(variant.name, "variant")

    issues = []
    for name, kinds in kinds_by_name.items():
        if len(kinds) > 1:
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.NAME_COLLISION,
                    f"Name '{name}' is used as {' and '.join(kinds)}",
                    group=name if "group" in kinds else None,
                    variant=name if "variant" in kinds else None,
                )
            )
    return issues


def validate_payload_uniformity(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """
    Check payload shapes of groups whose handlers receive destructured payloads.

    Only grouped-match dispatch unpacks payloads, and only for groups marked
    ``destructure``. Other groups may mix shapes freely.
    """
    issues = []
    for group in descriptor.groups:
        if not group.destructure or not group.variants:
            continue
        first = group.variants[0].payload
        if all(v.payload.is_compatible(first) for v in group.variants[1:]):
            continue
        shapes = ", ".join(f"{v.name}{v.payload.describe()}" for v in group.variants)
        issues.append(
            _issue(
                descriptor,
                ir.ValidationRule.PAYLOAD_MISMATCH,
                f"Group '{group.name}' destructures payloads but its variants "
                f"have different shapes: {shapes}",
                group=group.name,
            )
        )
    return issues


def _is_expression(text: str) -> bool:
    try:
        ast.parse(text, mode="eval")
    except SyntaxError:
        return False
    return True


def validate_identifiers(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """Check names and decorator expressions that end up in the emitted source."""
    issues = []

    for label, name in (("Enum", descriptor.name), ("Group enum", descriptor.group_enum)):
        if not is_identifier(name):
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.INVALID_IDENTIFIER,
                    f"{label} name '{name}' is not a valid identifier",
                )
            )
    for decorator in descriptor.decorators:
        if not _is_expression(decorator):
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.INVALID_IDENTIFIER,
                    f"Decorator '{decorator}' of enum '{descriptor.name}' "
                    "is not a valid expression",
                )
            )

    for group in descriptor.groups:
        # Group names become enum members; sunder/dunder names are reserved there.
        if not is_identifier(group.name) or group.name.startswith("_"):
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.INVALID_IDENTIFIER,
                    f"Group name '{group.name}' is not a valid identifier",
                    group=group.name,
                )
            )
        for variant in group.variants:
            if not is_identifier(variant.name):
                issues.append(
                    _issue(
                        descriptor,
                        ir.ValidationRule.INVALID_IDENTIFIER,
                        f"Variant name '{variant.name}' is not a valid identifier",
                        group=group.name,
                        variant=variant.name,
                    )
                )
            for payload_field in variant.payload.fields:
                if not is_identifier(payload_field.name):
                    issues.append(
                        _issue(
                            descriptor,
                            ir.ValidationRule.INVALID_IDENTIFIER,
                            f"Payload field '{payload_field.name}' of variant "
                            f"'{variant.name}' is not a valid identifier",
                            group=group.name,
                            variant=variant.name,
                        )
                    )
            for decorator in variant.decorators:
                if not _is_expression(decorator):
                    issues.append(
                        _issue(
                            descriptor,
                            ir.ValidationRule.INVALID_IDENTIFIER,
                            f"Decorator '{decorator}' of variant '{variant.name}' "
                            "is not a valid expression",
                            group=group.name,
                            variant=variant.name,
                        )
                    )
    return issues


def validate_helper_names(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """
    Check that derived helper names neither collide nor shadow declared names.

    'Round' and 'ROUND' are distinct groups but both derive 'is_round'.
    """
    issues = []
    group_names = list(dict.fromkeys(descriptor.group_names()))

    reported: set[frozenset[str]] = set()
    for derive in (predicate_name, handler_param):
        by_helper: dict[str, list[str]] = {}
        for name in group_names:
            by_helper.setdefault(derive(name), []).append(name)
        for helper, groups in by_helper.items():
            key = frozenset(groups)
            if len(groups) > 1 and key not in reported:
                reported.add(key)
                issues.append(
                    _issue(
                        descriptor,
                        ir.ValidationRule.HELPER_COLLISION,
                        f"Groups {_quoted(groups)} derive the same helper name '{helper}'",
                        group=groups[0],
                    )
                )

    for name in group_names:
        param = handler_param(name)
        if param in RESERVED_HANDLER_PARAMS:
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.HELPER_COLLISION,
                    f"Group '{name}' derives handler parameter '{param}', "
                    "which generated match functions already use",
                    group=name,
                )
            )
        elif param == descriptor.group_enum:
            # match_group reads the group enum by name.
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.HELPER_COLLISION,
                    f"Group '{name}' derives handler parameter '{param}', "
                    "which shadows the group enum inside generated match functions",
                    group=name,
                )
            )

    helpers = set(RESERVED_HELPER_NAMES) | {predicate_name(g) for g in group_names}
    declared = [descriptor.name, descriptor.group_enum, *group_names]
    declared += [v.name for v in descriptor.all_variants()]
    for name in dict.fromkeys(declared):
        if name in helpers:
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.HELPER_COLLISION,
                    f"Name '{name}' shadows a generated helper function",
                )
            )
        elif name in RESERVED_MODULE_NAMES:
            issues.append(
                _issue(
                    descriptor,
                    ir.ValidationRule.HELPER_COLLISION,
                    f"Name '{name}' shadows a module-level name of the generated module",
                )
            )
    return issues


# Reporting order.
RULES: list[Rule] = [
    validate_duplicate_variants,
    validate_duplicate_groups,
    validate_empty_groups,
    validate_name_collisions,
    validate_payload_uniformity,
    validate_identifiers,
    validate_helper_names,
]


def validate(descriptor: ir.EnumDescriptor) -> list[ir.ValidationIssue]:
    """
    Validate a descriptor against every structural rule.

    Args:
        descriptor: Descriptor to check

    Returns:
        Every issue found, grouped by rule in reporting order.
        An empty list means the descriptor is valid.
    """
    issues: list[ir.ValidationIssue] = []
    for rule in RULES:
        issues.extend(rule(descriptor))

    if issues:
        logger.debug("Descriptor '%s' has %d issue(s)", descriptor.name, len(issues))
    return issues


class ValidatedDescriptor(BaseModel):
    """
    A descriptor known to pass :func:`validate`.

    Construction re-runs validation, so an instance cannot wrap an invalid
    descriptor. The partitioner and the generator accept only this type.
    """

    descriptor: ir.EnumDescriptor

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _require_valid(self) -> ValidatedDescriptor:
        issues = validate(self.descriptor)
        if issues:
            raise ValidationError(issues)
        return self

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def group_enum(self) -> str:
        return self.descriptor.group_enum

    @property
    def groups(self) -> tuple[ir.GroupSpec, ...]:
        return self.descriptor.groups


def ensure_valid(descriptor: ir.EnumDescriptor) -> ValidatedDescriptor:
    """
    Validate a descriptor, raising on any issue.

    Raises:
        ValidationError: carrying every issue found
    """
    return ValidatedDescriptor(descriptor=descriptor)
