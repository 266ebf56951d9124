"""Core enumgroup functionality: IR, loader, validator, partitioner, generator."""

from . import ir
from .builder import DescriptorBuilder
from .errors import (
    EmitError,
    EnumGroupError,
    ErrorContext,
    GenerationError,
    ParseError,
    PreconditionError,
    ValidationError,
)
from .generator import CodeGenerator, GenerationResult, resolve_artifacts
from .loader import DeclarationFile, EnumDeclaration, load_declarations, loads_declarations
from .partition import PartitionIndex, partition
from .pipeline import generate_declarations, run_pipeline
from .validator import ValidatedDescriptor, ensure_valid, validate

__all__ = [
    "ir",
    "DescriptorBuilder",
    # Errors
    "EnumGroupError",
    "ErrorContext",
    "ParseError",
    "ValidationError",
    "GenerationError",
    "PreconditionError",
    "EmitError",
    # Loading
    "DeclarationFile",
    "EnumDeclaration",
    "load_declarations",
    "loads_declarations",
    # Pipeline stages
    "validate",
    "ensure_valid",
    "ValidatedDescriptor",
    "partition",
    "PartitionIndex",
    "CodeGenerator",
    "GenerationResult",
    "resolve_artifacts",
    "generate_declarations",
    "run_pipeline",
]
