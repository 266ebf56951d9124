"""
Naming rules for generated helpers.

Every derived identifier (predicate names, handler parameters, module names)
comes from here so the validator and the generator agree on them.
"""

from __future__ import annotations

import keyword
import re

GROUP_OF = "group_of"
VARIANTS_OF = "variants_of"
MATCH_GROUP = "match_group"

# Name of the detailed-enum parameter of every generated function.
VALUE_PARAM = "value"

# Function names every generated module may define.
RESERVED_HELPER_NAMES = frozenset({GROUP_OF, VARIANTS_OF, MATCH_GROUP})

# Names a handler parameter may not take inside a generated match function.
RESERVED_HANDLER_PARAMS = RESERVED_HELPER_NAMES | {VALUE_PARAM, "cast"}


def table_name(function: str) -> str:
    """Module-level table read by a generated function: 'group_of' -> '_GROUP_OF_TABLE'."""
    return f"_{function.upper()}_TABLE"


# Module-level names a generated module binds besides its declarations.
RESERVED_MODULE_NAMES = frozenset(
    {"Any", "Callable", "Enum", "TypeVar", "annotations", "cast", "dataclass", "_R"}
    | {table_name(GROUP_OF), table_name(VARIANTS_OF)}
)

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """
    Convert a PascalCase or camelCase identifier to snake_case.

    Examples:
        >>> snake_case("GroupAlpha")
        'group_alpha'
        >>> snake_case("HTTPError")
        'http_error'
    """
    return _CAMEL_BOUNDARY_RE.sub("_", name).lower()


def is_identifier(name: str) -> bool:
    """Check that a name is a usable Python identifier (not a keyword)."""
    return name.isidentifier() and not keyword.iskeyword(name)


def predicate_name(group: str) -> str:
    """Name of the membership predicate for a group: 'Round' -> 'is_round'."""
    return f"is_{snake_case(group)}"


def handler_param(group: str) -> str:
    """Keyword parameter carrying a group's handler: 'Round' -> 'round'."""
    name = snake_case(group)
    if keyword.iskeyword(name) or keyword.issoftkeyword(name):
        name += "_"
    return name


def handler_alias(group: str) -> str:
    """Local alias a dispatch function imports a group's handler under."""
    return f"_{snake_case(group)}_handler"


def default_module_name(enum_name: str) -> str:
    """Default output module for an enum: 'WireMsg' -> 'wire_msg_groups'."""
    return f"{snake_case(enum_name)}_groups"
