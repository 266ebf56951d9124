"""
enumgroup - grouped enums for Python.

Declare a fine-grained enum once, partition its variants into named groups,
and generate the group enum, conversions, predicates and grouped-match
dispatch functions as ordinary Python source.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.builder import DescriptorBuilder
from .core.errors import (
    EmitError,
    EnumGroupError,
    GenerationError,
    ParseError,
    PreconditionError,
    ValidationError,
)
from .core.pipeline import run_pipeline

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "DescriptorBuilder",
    "run_pipeline",
    "EnumGroupError",
    "ParseError",
    "ValidationError",
    "GenerationError",
    "PreconditionError",
    "EmitError",
]
