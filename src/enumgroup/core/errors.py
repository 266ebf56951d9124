"""
Error types for enumgroup loading, validation, and generation.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .ir.diagnostics import GenerationIssue, ValidationIssue


class EnumGroupError(Exception):
    """Base exception for all enumgroup errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(EnumGroupError):
    """
    Raised when a declaration file cannot be read.

    Examples:
    - Invalid TOML syntax
    - Missing required keys
    - Malformed payload declarations
    """

    pass


class ValidationError(EnumGroupError):
    """
    Raised when a descriptor breaks one or more structural rules.

    Carries every issue found, not just the first.

    Examples:
    - Variant declared in two groups
    - Empty group
    - Group name equal to a variant name
    """

    def __init__(
        self,
        issues: Sequence[ValidationIssue],
        context: Optional["ErrorContext"] = None,
    ):
        self.issues = list(issues)
        message = f"{len(self.issues)} validation error(s):\n" + "\n".join(
            f"  - {issue.format()}" for issue in self.issues
        )
        super().__init__(message, context)


class GenerationError(EnumGroupError):
    """
    Raised when one or more requested artifacts cannot be generated.

    Examples:
    - Dispatch request missing a handler for a declared group
    - Dispatch request naming an undeclared group
    """

    def __init__(
        self,
        issues: Sequence[GenerationIssue],
        context: Optional["ErrorContext"] = None,
    ):
        self.issues = list(issues)
        message = f"{len(self.issues)} generation error(s):\n" + "\n".join(
            f"  - {issue.format()}" for issue in self.issues
        )
        super().__init__(message, context)


class PreconditionError(EnumGroupError):
    """
    Raised on internal misuse, e.g. partitioning an unvalidated descriptor.

    This is a programming error, not a user-facing diagnostic.
    """

    pass


class EmitError(EnumGroupError):
    """
    Raised when the emission adapter cannot render a declaration.

    Examples:
    - Unknown declaration record
    - Output path issues
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error.

    Attributes:
        file: Declaration file the error came from
        enum_name: Optional detailed enum name
    """

    file: Path | None = None
    enum_name: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "shapes.toml (enum Shape)"
        """
        parts = []
        if self.file:
            parts.append(str(self.file))
        if self.enum_name:
            parts.append(f"(enum {self.enum_name})")
        return " ".join(parts)


def make_parse_error(
    message: str,
    file: Path | None = None,
    enum_name: str | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with optional context.

    Args:
        message: Error description
        file: Optional declaration file path
        enum_name: Optional enum being parsed

    Returns:
        ParseError with context if location provided
    """
    if file or enum_name:
        return ParseError(message, ErrorContext(file=file, enum_name=enum_name))
    return ParseError(message)
