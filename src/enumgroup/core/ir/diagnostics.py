"""
Structured diagnostics for enumgroup.

Validation and generation report problems as records rather than strings so
a front-end can render them however it likes. Each record names the rule it
violates and the enum, group and variant involved.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ValidationRule(StrEnum):
    """Structural rules checked by the validator, in reporting order."""

    DUPLICATE_VARIANT = "duplicate_variant"
    DUPLICATE_GROUP = "duplicate_group"
    EMPTY_GROUP = "empty_group"
    NAME_COLLISION = "name_collision"
    PAYLOAD_MISMATCH = "payload_mismatch"
    INVALID_IDENTIFIER = "invalid_identifier"
    HELPER_COLLISION = "helper_collision"


class GenerationRule(StrEnum):
    """Problems only detectable while emitting a specific artifact."""

    MISSING_GROUP_HANDLER = "missing_group_handler"
    UNKNOWN_GROUP_HANDLER = "unknown_group_handler"
    INVALID_HANDLER_REFERENCE = "invalid_handler_reference"
    INVALID_DISPATCH_NAME = "invalid_dispatch_name"
    DISPATCH_NAME_COLLISION = "dispatch_name_collision"


class Diagnostic(BaseModel):
    """
    Base diagnostic record.

    Attributes:
        message: Human-readable description
        enum_name: Detailed enum the problem belongs to
        group: Group involved, if any
        variant: Variant involved, if any
    """

    message: str
    enum_name: str | None = None
    group: str | None = None
    variant: str | None = None

    model_config = ConfigDict(frozen=True)

    def location(self) -> str:
        parts = [p for p in (self.enum_name, self.group, self.variant) if p]
        return "::".join(parts)

    def format(self) -> str:
        location = self.location()
        return f"{location}: {self.message}" if location else self.message


class ValidationIssue(Diagnostic):
    """A violated structural rule."""

    rule: ValidationRule

    def format(self) -> str:
        return f"[{self.rule.value}] {super().format()}"


class GenerationIssue(Diagnostic):
    """
    A problem raised while generating one artifact.

    Attributes:
        artifact: Name of the artifact that failed (e.g. a dispatch function)
    """

    rule: GenerationRule
    artifact: str | None = None

    def format(self) -> str:
        return f"[{self.rule.value}] {super().format()}"
