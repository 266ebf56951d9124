"""
Declaration file loader.

Reads grouped-enum declarations from TOML and builds descriptors and
dispatch requests. This is the only place declaration text is parsed; the
rest of the pipeline works on IR.

File format:

    [generate]
    output_dir = "generated"

    [[enum]]
    name = "Shape"
    group_enum = "ShapeGroup"        # optional, default '<name>Group'
    module = "shapes"                # optional output module name
    imports = ["from typing import final", "from myapp.wire import register"]
    decorators = ["register"]        # applied to every generated class

    [[enum.groups]]
    name = "Round"
    destructure = false
    variants = [
      { name = "Circle", payload = "float" },
      { name = "Ellipse", payload = "major: float, minor: float", decorators = ["final"] },
      "Point",                       # unit variant
    ]

    [[enum.dispatch]]
    name = "describe"
    handlers = { Round = "shapes.handlers:on_round" }
"""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from . import ir
from .config import GeneratorConfig, load_generator_config, require_string_list
from .errors import ParseError, make_parse_error
from .naming import default_module_name, is_identifier

logger = logging.getLogger(__name__)

_ENUM_KEYS = frozenset(
    {"name", "group_enum", "module", "imports", "decorators", "doc", "groups", "dispatch"}
)
_GROUP_KEYS = frozenset({"name", "destructure", "doc", "variants"})
_VARIANT_KEYS = frozenset({"name", "payload", "decorators", "doc"})
_DISPATCH_KEYS = frozenset({"name", "handlers", "doc"})

_OPEN_BRACKETS = {"(": ")", "[": "]", "{": "}"}


@dataclass
class EnumDeclaration:
    """
    One ``[[enum]]`` entry.

    Attributes:
        descriptor: The parsed (not yet validated) descriptor
        dispatches: Dispatch functions requested for this enum
        module_name: Name of the module to generate
    """

    descriptor: ir.EnumDescriptor
    dispatches: list[ir.DispatchRequest] = field(default_factory=list)
    module_name: str = ""


@dataclass
class DeclarationFile:
    """A loaded declaration file."""

    path: Path | None
    config: GeneratorConfig
    enums: list[EnumDeclaration] = field(default_factory=list)


def split_top_level(text: str, separator: str = ",") -> list[str]:
    """
    Split on a separator that is not nested inside brackets.

    Examples:
        >>> split_top_level("a: dict[str, int], b: int")
        ['a: dict[str, int]', 'b: int']
    """
    parts: list[str] = []
    stack: list[str] = []
    current: list[str] = []
    for char in text:
        if char in _OPEN_BRACKETS:
            stack.append(_OPEN_BRACKETS[char])
        elif stack and char == stack[-1]:
            stack.pop()
        elif char == separator and not stack:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)
    if stack:
        raise ValueError(f"Unbalanced brackets in '{text}'")
    parts.append("".join(current).strip())
    return parts


def parse_payload(declared: str | dict[str, Any] | None) -> ir.PayloadShape:
    """
    Parse a payload declaration.

    - omitted, empty or '()' -> unit
    - 'float' -> single
    - 'major: float, minor: float' or {major = "float", ...} -> fields

    Raises:
        ValueError: On malformed declarations
    """
    if declared is None:
        return ir.PayloadShape.unit()

    if isinstance(declared, dict):
        for name, type_name in declared.items():
            if not isinstance(type_name, str):
                raise ValueError(f"Type of payload field '{name}' must be a string")
        return ir.PayloadShape.of_fields(*declared.items())

    if not isinstance(declared, str):
        raise ValueError(f"Payload must be a string or a table, got {type(declared).__name__}")

    text = declared.strip()
    if text in ("", "()"):
        return ir.PayloadShape.unit()

    parts = split_top_level(text)
    if any(":" in part for part in parts):
        fields = []
        for part in parts:
            name, sep, type_name = part.partition(":")
            if not sep or not name.strip() or not type_name.strip():
                raise ValueError(f"Payload field '{part}' must look like 'name: type'")
            fields.append((name.strip(), type_name.strip()))
        return ir.PayloadShape.of_fields(*fields)

    if len(parts) > 1:
        raise ValueError(f"Payload '{text}' has several types; name them as 'name: type'")
    return ir.PayloadShape.single(parts[0])


def _check_keys(data: dict[str, Any], allowed: frozenset[str], what: str) -> None:
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ValueError(f"Unknown key(s) in {what}: {', '.join(unknown)}")


def _require_table(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a table")
    return value


def _require_array(value: Any, what: str) -> list[Any]:
    if not isinstance(value, list):
        raise ValueError(f"{what} must be an array")
    return value


def _build_variant(data: Any, group_name: str) -> ir.VariantSpec:
    if isinstance(data, str):
        return ir.VariantSpec(name=data)
    data = _require_table(data, f"Variant in group '{group_name}'")
    _check_keys(data, _VARIANT_KEYS, f"variant of group '{group_name}'")
    if "name" not in data:
        raise ValueError(f"Variant in group '{group_name}' is missing 'name'")
    return ir.VariantSpec(
        name=data["name"],
        payload=parse_payload(data.get("payload")),
        decorators=require_string_list(
            data.get("decorators", []), f"Decorators of variant '{data['name']}'"
        ),
        doc=data.get("doc"),
    )


def _build_group(data: Any) -> ir.GroupSpec:
    data = _require_table(data, "Group")
    _check_keys(data, _GROUP_KEYS, "group")
    if "name" not in data:
        raise ValueError("Group is missing 'name'")
    name = data["name"]
    return ir.GroupSpec(
        name=name,
        destructure=data.get("destructure", False),
        doc=data.get("doc"),
        variants=[
            _build_variant(v, name)
            for v in _require_array(data.get("variants", []), f"Variants of group '{name}'")
        ],
    )


def _build_dispatch(data: Any) -> ir.DispatchRequest:
    data = _require_table(data, "Dispatch")
    _check_keys(data, _DISPATCH_KEYS, "dispatch")
    return ir.DispatchRequest(
        name=data.get("name", ""),
        handlers=_require_table(data.get("handlers", {}), "Dispatch handlers"),
        doc=data.get("doc"),
    )


def build_enum_declaration(data: dict[str, Any]) -> EnumDeclaration:
    """
    Build one enum declaration from its table.

    Raises:
        ValueError / pydantic.ValidationError: On malformed input
    """
    _check_keys(data, _ENUM_KEYS, "enum")
    if "name" not in data:
        raise ValueError("Enum is missing 'name'")

    descriptor = ir.EnumDescriptor(
        name=data["name"],
        group_enum=data.get("group_enum", ""),
        doc=data.get("doc"),
        imports=require_string_list(data.get("imports", []), "Enum imports"),
        decorators=require_string_list(data.get("decorators", []), "Enum decorators"),
        groups=[_build_group(g) for g in _require_array(data.get("groups", []), "Enum groups")],
    )

    module_name = data.get("module")
    if module_name is None:
        module_name = default_module_name(descriptor.name)
    elif not isinstance(module_name, str) or not is_identifier(module_name):
        raise ValueError(f"Module name {module_name!r} is not a valid identifier")

    dispatches = _require_array(data.get("dispatch", []), "Enum dispatch")
    return EnumDeclaration(
        descriptor=descriptor,
        dispatches=[_build_dispatch(d) for d in dispatches],
        module_name=module_name,
    )


def loads_declarations(text: str, path: Path | None = None) -> DeclarationFile:
    """
    Parse declarations from TOML text.

    Args:
        text: TOML source
        path: File the text came from (for messages and relative paths)

    Raises:
        ParseError: On TOML syntax errors, malformed declarations, or two
            enums generating the same module
    """
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise make_parse_error(f"Invalid TOML: {e}", file=path) from e

    base_dir = path.parent if path else Path(".")
    try:
        config = load_generator_config(data.get("generate", {}), base_dir)
    except ValueError as e:
        raise make_parse_error(str(e), file=path) from e

    entries = data.get("enum", [])
    if not isinstance(entries, list):
        raise make_parse_error("'enum' must be an array of tables ([[enum]])", file=path)

    enums = []
    owners: dict[str, str] = {}
    for entry in entries:
        name = entry.get("name") if isinstance(entry, dict) else None
        try:
            declaration = build_enum_declaration(_require_table(entry, "Enum"))
        except PydanticValidationError as e:
            raise make_parse_error(
                f"Malformed declaration: {e.error_count()} error(s)\n{e}",
                file=path,
                enum_name=name,
            ) from e
        except ValueError as e:
            raise make_parse_error(str(e), file=path, enum_name=name) from e

        module_name = declaration.module_name
        if module_name in owners:
            raise make_parse_error(
                f"Enums '{owners[module_name]}' and '{declaration.descriptor.name}' "
                f"both generate module '{module_name}'",
                file=path,
                enum_name=declaration.descriptor.name,
            )
        owners[module_name] = declaration.descriptor.name
        enums.append(declaration)

    logger.debug("Loaded %d enum declaration(s) from %s", len(enums), path or "<string>")
    return DeclarationFile(path=path, config=config, enums=enums)


def load_declarations(path: Path) -> DeclarationFile:
    """
    Load declarations from a TOML file.

    Raises:
        ParseError: If the file cannot be read or parsed
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise make_parse_error(f"Cannot read declaration file: {e}", file=path) from e
    return loads_declarations(text, path)
