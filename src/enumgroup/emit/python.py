"""
Python emission adapter.

Renders a GeneratedModule into an importable Python module:

- the detailed enum as a plain base class
- one base class per group, deriving from it
- one frozen dataclass per variant, deriving from its group's class
- the group enum as an ``enum.Enum`` whose values are the group names
- module-level dispatch tables and the functions that read them

Output is deterministic: the same module renders to the same text.
"""

from __future__ import annotations

import logging
from pathlib import Path

from enumgroup._version import get_version
from enumgroup.core import ir
from enumgroup.core.errors import EmitError
from enumgroup.core.naming import handler_alias, table_name

from .output import is_current, write_source

logger = logging.getLogger(__name__)

HEADER_START = "# === AUTO-GENERATED BY ENUMGROUP ==========================================="
HEADER_END = "# =========================================================================="
INDENT = "    "


def _docstring(text: str, indent: str = INDENT) -> str:
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'{indent}"""{escaped}"""'


def _tuple_literal(items: list[str]) -> str:
    if len(items) == 1:
        return f"({items[0]},)"
    return "(" + ", ".join(items) + ")"


def _decorator_lines(decorators: list[str]) -> list[str]:
    return [f"@{decorator}" for decorator in decorators]


class PythonEmitter:
    """
    Render declaration records as Python source.

    Each declaration kind has its own ``_render_*`` method returning one
    top-level block; blocks are joined with two blank lines.
    """

    def render(self, module: ir.GeneratedModule, header: str | None = None) -> str:
        """
        Render a complete module.

        Args:
            module: Declarations from the generator
            header: Optional extra line for the header comment

        Returns:
            Python source text

        Raises:
            EmitError: If a declaration cannot be rendered
        """
        blocks = [self._render_preamble(module, header)]
        if self._uses_type_var(module):
            blocks.append('_R = TypeVar("_R")')
        for declaration in module.declarations:
            blocks.append(self._render_declaration(module, declaration))
        source = "\n\n\n".join(blocks) + "\n"
        logger.debug("Rendered %d line(s) for '%s'", source.count("\n"), module.enum_name)
        return source

    # === Preamble ===

    def _render_preamble(self, module: ir.GeneratedModule, header: str | None) -> str:
        lines = [
            HEADER_START,
            f"# Generated by enumgroup {get_version()} from enum {module.enum_name}.",
        ]
        groups = [d for d in module.declarations if isinstance(d, ir.GroupTypeDecl)]
        if groups:
            lines.append("# Groups:")
            for group in groups:
                lines.append(f"#   - {group.name}: {', '.join(group.variants)}")
        if header:
            lines.append(f"# {header}")
        lines.append("# Do not edit by hand; regenerate instead.")
        lines.append(HEADER_END)
        lines.append(f'"""Grouped enum {module.enum_name} and its group helpers."""')
        lines.append("")
        lines.append("from __future__ import annotations")

        imports = self._stdlib_imports(module)
        if imports:
            lines.append("")
            lines.extend(imports)
        if module.imports:
            lines.append("")
            lines.extend(module.imports)

        exported = [d.name for d in module.declarations]
        lines.append("")
        lines.append("__all__ = [")
        lines.extend(f'{INDENT}"{name}",' for name in exported)
        lines.append("]")
        return "\n".join(lines)

    def _functions(
        self, module: ir.GeneratedModule, kind: ir.FunctionKind
    ) -> list[ir.FunctionDecl]:
        return [f for f in module.functions() if f.function == kind]

    def _uses_type_var(self, module: ir.GeneratedModule) -> bool:
        return bool(self._functions(module, ir.FunctionKind.MATCH_GROUP))

    def _uses_cast(self, module: ir.GeneratedModule) -> bool:
        return any(
            arm.destructure is None
            for function in self._functions(module, ir.FunctionKind.MATCH_GROUP)
            for arm in function.table.arms
        )

    def _stdlib_imports(self, module: ir.GeneratedModule) -> list[str]:
        kinds = {d.kind for d in module.declarations}
        typing_names = []
        if self._functions(module, ir.FunctionKind.DISPATCH):
            typing_names.append("Any")
        if self._uses_type_var(module):
            typing_names.append("TypeVar")
        if self._uses_cast(module):
            typing_names.append("cast")

        imports = []
        if self._uses_type_var(module):
            imports.append("from collections.abc import Callable")
        if ir.DeclarationKind.VARIANT_TYPE in kinds:
            imports.append("from dataclasses import dataclass")
        if ir.DeclarationKind.GROUP_ENUM in kinds:
            imports.append("from enum import Enum")
        if typing_names:
            imports.append(f"from typing import {', '.join(sorted(typing_names))}")
        return imports

    # === Declarations ===

    def _render_declaration(self, module: ir.GeneratedModule, declaration: ir.Declaration) -> str:
        if isinstance(declaration, ir.DetailedTypeDecl):
            return self._render_detailed_type(declaration)
        if isinstance(declaration, ir.GroupTypeDecl):
            return self._render_group_type(declaration)
        if isinstance(declaration, ir.VariantTypeDecl):
            return self._render_variant_type(declaration)
        if isinstance(declaration, ir.GroupEnumDecl):
            return self._render_group_enum(declaration)
        if isinstance(declaration, ir.FunctionDecl):
            return self._render_function(module, declaration)
        raise EmitError(f"Cannot render declaration of type {type(declaration).__name__}")

    def _render_detailed_type(self, decl: ir.DetailedTypeDecl) -> str:
        lines = [
            *_decorator_lines(decl.decorators),
            f"class {decl.name}:",
            _docstring(decl.doc or f"Base of every {decl.name} variant."),
            "",
            f"{INDENT}__slots__ = ()",
        ]
        return "\n".join(lines)

    def _render_group_type(self, decl: ir.GroupTypeDecl) -> str:
        lines = [
            *_decorator_lines(decl.decorators),
            f"class {decl.name}({decl.base}):",
            _docstring(decl.doc or f"Group {decl.name}: {', '.join(decl.variants)}."),
            "",
            f"{INDENT}__slots__ = ()",
        ]
        return "\n".join(lines)

    def _render_variant_type(self, decl: ir.VariantTypeDecl) -> str:
        # User decorators run after dataclass has built the class.
        lines = [
            *_decorator_lines(decl.decorators),
            "@dataclass(frozen=True)",
            f"class {decl.name}({decl.base}):",
            _docstring(decl.doc or f"{decl.name} variant of group {decl.base}."),
        ]
        payload = decl.payload
        if payload.kind == ir.PayloadKind.SINGLE:
            lines.append("")
            lines.append(f"{INDENT}{ir.SINGLE_VALUE_ATTRIBUTE}: {payload.type_name}")
        elif payload.kind == ir.PayloadKind.FIELDS:
            lines.append("")
            lines.extend(f"{INDENT}{f.name}: {f.type_name}" for f in payload.fields)
        return "\n".join(lines)

    def _render_group_enum(self, decl: ir.GroupEnumDecl) -> str:
        lines = [
            f"class {decl.name}(Enum):",
            _docstring(decl.doc or f"Group tags of {decl.name}."),
            "",
        ]
        lines.extend(f'{INDENT}{member} = "{member}"' for member in decl.members)
        return "\n".join(lines)

    # === Functions ===

    def _render_function(self, module: ir.GeneratedModule, decl: ir.FunctionDecl) -> str:
        if decl.function == ir.FunctionKind.GROUP_OF:
            return self._render_group_of(module, decl)
        if decl.function == ir.FunctionKind.VARIANTS_OF:
            return self._render_variants_of(module, decl)
        if decl.function == ir.FunctionKind.PREDICATE:
            return self._render_predicate(module, decl)
        if decl.function in (ir.FunctionKind.MATCH_GROUP, ir.FunctionKind.DISPATCH):
            return self._render_grouped_match(module, decl)
        raise EmitError(f"Cannot render function kind '{decl.function}'")

    def _render_group_of(self, module: ir.GeneratedModule, decl: ir.FunctionDecl) -> str:
        table = table_name(decl.name)
        value = decl.params[0]
        lines = [f"{table}: dict[type[{module.enum_name}], {module.group_enum}] = {{"]
        for arm in decl.table.arms:
            lines.append(f"{INDENT}{arm.match}: {module.group_enum}.{arm.targets[0]},")
        lines.append("}")
        lines.append("")
        lines.append("")
        lines.append(f"def {decl.name}({value.name}: {value.type_ref}) -> {decl.returns}:")
        lines.append(_docstring(decl.doc or ""))
        lines.append(f"{INDENT}try:")
        lines.append(f"{INDENT * 2}return {table}[type({value.name})]")
        lines.append(f"{INDENT}except KeyError:")
        lines.append(
            f'{INDENT * 2}raise TypeError(f"{{{value.name}!r}} is not a '
            f'{module.enum_name} variant") from None'
        )
        return "\n".join(lines)

    def _render_variants_of(self, module: ir.GeneratedModule, decl: ir.FunctionDecl) -> str:
        table = table_name(decl.name)
        group = decl.params[0]
        result = f"tuple[type[{module.enum_name}], ...]"
        lines = [f"{table}: dict[{module.group_enum}, {result}] = {{"]
        for arm in decl.table.arms:
            lines.append(
                f"{INDENT}{module.group_enum}.{arm.match}: {_tuple_literal(arm.targets)},"
            )
        lines.append("}")
        lines.append("")
        lines.append("")
        lines.append(f"def {decl.name}({group.name}: {group.type_ref}) -> {result}:")
        lines.append(_docstring(decl.doc or ""))
        lines.append(f"{INDENT}return {table}[{group.name}]")
        return "\n".join(lines)

    def _render_predicate(self, module: ir.GeneratedModule, decl: ir.FunctionDecl) -> str:
        value = decl.params[0]
        group = decl.table.arms[0].match
        lines = [
            f"def {decl.name}({value.name}: {value.type_ref}) -> {decl.returns}:",
            _docstring(decl.doc or ""),
            f"{INDENT}return group_of({value.name}) is {module.group_enum}.{group}",
        ]
        return "\n".join(lines)

    def _handler_annotation(self, param: ir.Parameter, arm: ir.DispatchArm) -> str:
        payload = arm.destructure
        if payload is None:
            return f"Callable[[{param.type_ref}], _R]"
        if payload.kind == ir.PayloadKind.UNIT:
            return "Callable[[], _R]"
        if payload.kind == ir.PayloadKind.SINGLE:
            return f"Callable[[{payload.type_name}], _R]"
        return "Callable[..., _R]"

    def _call(self, target: str, value: str, arm: ir.DispatchArm, cast_to: str | None) -> str:
        payload = arm.destructure
        if payload is None:
            argument = f"cast({cast_to}, {value})" if cast_to else value
            return f"{target}({argument})"
        if payload.kind == ir.PayloadKind.UNIT:
            return f"{target}()"
        if payload.kind == ir.PayloadKind.SINGLE:
            return f"{target}({value}.{ir.SINGLE_VALUE_ATTRIBUTE})"
        keywords = ", ".join(f"{f.name}={value}.{f.name}" for f in payload.fields)
        return f"{target}({keywords})"

    def _render_grouped_match(self, module: ir.GeneratedModule, decl: ir.FunctionDecl) -> str:
        value = decl.params[0]
        is_dispatch = decl.function == ir.FunctionKind.DISPATCH

        if is_dispatch:
            lines = [f"def {decl.name}({value.name}: {value.type_ref}) -> Any:"]
        else:
            lines = [f"def {decl.name}(", f"{INDENT}{value.name}: {value.type_ref},", f"{INDENT}*,"]
            handlers = {p.name: p for p in decl.params if p.role == ir.ParamRole.HANDLER}
            for arm in decl.table.arms:
                param = handlers[arm.handler or ""]
                lines.append(f"{INDENT}{param.name}: {self._handler_annotation(param, arm)},")
            lines.append(") -> _R:")
        lines.append(_docstring(decl.doc or ""))

        targets: dict[str, str] = {}
        if is_dispatch:
            # Imported on call so handler modules may import this module.
            for arm in decl.table.arms:
                ref = ir.HandlerRef.parse(arm.handler or "")
                if ref is None:
                    raise EmitError(f"Invalid handler reference '{arm.handler}' in '{decl.name}'")
                alias = handler_alias(arm.match)
                lines.append(f"{INDENT}from {ref.module} import {ref.attribute} as {alias}")
                targets[arm.match] = alias
            lines.append("")
        else:
            targets = {arm.match: arm.handler or "" for arm in decl.table.arms}

        lines.append(f"{INDENT}_group = group_of({value.name})")
        for arm in decl.table.arms:
            cast_to = None if is_dispatch else arm.match
            lines.append(f"{INDENT}if _group is {module.group_enum}.{arm.match}:")
            call = self._call(targets[arm.match], value.name, arm, cast_to)
            lines.append(f"{INDENT * 2}return {call}")
        lines.append(f'{INDENT}raise AssertionError(f"unhandled group {{_group!r}}")')
        return "\n".join(lines)


def render_module(module: ir.GeneratedModule, header: str | None = None) -> str:
    """Render a module with a fresh PythonEmitter."""
    return PythonEmitter().render(module, header)


def write_module(module: ir.GeneratedModule, path: Path, header: str | None = None) -> Path:
    """
    Render a module and write it to a file, creating parent directories.

    Returns:
        Path written
    """
    return write_source(render_module(module, header), path)


def is_up_to_date(module: ir.GeneratedModule, path: Path, header: str | None = None) -> bool:
    """Check whether a file already holds exactly what would be generated."""
    return is_current(render_module(module, header), path)
