"""
enumgroup Intermediate Representation (IR) types.

Descriptor types describe a grouped-enum declaration; declaration types are
what the generator produces from it. All types are re-exported here.
"""

# Declarations (generator output)
from .declarations import (
    Artifact,
    Declaration,
    DeclarationKind,
    DetailedTypeDecl,
    DispatchArm,
    DispatchTable,
    FunctionDecl,
    FunctionKind,
    GeneratedModule,
    GroupEnumDecl,
    GroupTypeDecl,
    Parameter,
    ParamRole,
    TableKey,
    VariantTypeDecl,
)

# Descriptor
from .descriptor import (
    GROUP_ENUM_SUFFIX,
    EnumDescriptor,
    GroupSpec,
    VariantSpec,
)

# Diagnostics
from .diagnostics import (
    Diagnostic,
    GenerationIssue,
    GenerationRule,
    ValidationIssue,
    ValidationRule,
)

# Dispatch requests
from .dispatch import (
    DispatchRequest,
    HandlerRef,
)

# Payloads
from .payload import (
    SINGLE_VALUE_ATTRIBUTE,
    PayloadField,
    PayloadKind,
    PayloadShape,
)

__all__ = [
    # Declarations
    "Artifact",
    "Declaration",
    "DeclarationKind",
    "DetailedTypeDecl",
    "DispatchArm",
    "DispatchTable",
    "FunctionDecl",
    "FunctionKind",
    "GeneratedModule",
    "GroupEnumDecl",
    "GroupTypeDecl",
    "Parameter",
    "ParamRole",
    "TableKey",
    "VariantTypeDecl",
    # Descriptor
    "GROUP_ENUM_SUFFIX",
    "EnumDescriptor",
    "GroupSpec",
    "VariantSpec",
    # Diagnostics
    "Diagnostic",
    "GenerationIssue",
    "GenerationRule",
    "ValidationIssue",
    "ValidationRule",
    # Dispatch
    "DispatchRequest",
    "HandlerRef",
    # Payloads
    "SINGLE_VALUE_ATTRIBUTE",
    "PayloadField",
    "PayloadKind",
    "PayloadShape",
]
