"""
Declaration file commands for enumgroup CLI.

Commands:
- validate: check every enum in a declaration file
- generate: write one generated module per enum
- inspect: show groups, variants and dispatch functions
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from enumgroup.core import ir
from enumgroup.core.config import parse_artifacts
from enumgroup.core.errors import EnumGroupError, GenerationError, ValidationError
from enumgroup.core.loader import DeclarationFile, load_declarations
from enumgroup.core.naming import predicate_name
from enumgroup.core.pipeline import generate_declarations, run_pipeline
from enumgroup.core.validator import validate
from enumgroup.emit import is_current, render_json, render_module, write_source

from .utils import print_error, print_issues

console = Console()

OUTPUT_SUFFIXES = {"python": ".py", "json": ".json"}

DeclarationFileArg = Annotated[
    Path, typer.Argument(help="Declaration file (TOML)", exists=True, dir_okay=False)
]


def _load(file: Path) -> DeclarationFile:
    try:
        return load_declarations(file)
    except EnumGroupError as e:
        print_error(e)
        raise typer.Exit(code=1)


def _render(module: ir.GeneratedModule, format: str, header: str | None) -> str:
    if format == "json":
        return render_json(module)
    return render_module(module, header)


# =============================================================================
# validate
# =============================================================================


def validate_command(file: DeclarationFileArg) -> None:
    """
    Validate every enum in a declaration file.

    Reports all structural issues and dispatch problems, not just the first.
    """
    declarations = _load(file)

    failed = 0
    for declaration in declarations.enums:
        descriptor = declaration.descriptor
        issues: list[ir.Diagnostic] = list(validate(descriptor))
        if not issues:
            result = generate_declarations(descriptor, dispatches=declaration.dispatches)
            issues.extend(result.errors)
        if issues:
            failed += 1
            typer.echo(f"{descriptor.name}: {len(issues)} error(s)", err=True)
            print_issues(issues)

    if failed:
        raise typer.Exit(code=1)
    typer.echo(f"OK: {len(declarations.enums)} enum(s) valid.")


# =============================================================================
# generate
# =============================================================================


def generate_command(
    file: DeclarationFileArg,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output directory (overrides [generate])"),
    ] = None,
    artifact: Annotated[
        list[str] | None,
        typer.Option("--artifact", "-a", help="Artifact to emit; repeat for several"),
    ] = None,
    format: Annotated[
        str, typer.Option("--format", "-f", help="Output format: 'python' or 'json'")
    ] = "python",
    check: Annotated[
        bool, typer.Option("--check", help="Fail if generated files are missing or stale")
    ] = False,
) -> None:
    """
    Generate one module per enum in a declaration file.
    """
    if format not in OUTPUT_SUFFIXES:
        typer.echo(f"Unknown format '{format}'. Use 'python' or 'json'.", err=True)
        raise typer.Exit(code=1)

    declarations = _load(file)
    try:
        config = declarations.config.with_overrides(
            output_dir=output, artifacts=parse_artifacts(artifact or [])
        )
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    failed = 0
    stale: list[Path] = []
    for declaration in declarations.enums:
        name = declaration.descriptor.name
        path = config.output_dir / f"{declaration.module_name}{OUTPUT_SUFFIXES[format]}"
        try:
            module = run_pipeline(
                declaration.descriptor, config.artifacts, declaration.dispatches
            )
            source = _render(module, format, config.header)
            if check:
                if not is_current(source, path):
                    stale.append(path)
            else:
                write_source(source, path)
                typer.echo(f"Wrote {path}")
        except (ValidationError, GenerationError) as e:
            failed += 1
            typer.echo(f"{name}: generation failed", err=True)
            print_error(e)
        except EnumGroupError as e:
            failed += 1
            print_error(e)

    for path in stale:
        typer.echo(f"Stale: {path}", err=True)
    if failed or stale:
        raise typer.Exit(code=1)
    if check:
        typer.echo(f"OK: {len(declarations.enums)} module(s) up to date.")


# =============================================================================
# inspect
# =============================================================================


def inspect_command(file: DeclarationFileArg) -> None:
    """
    Show the groups, variants and dispatch functions of each enum.
    """
    declarations = _load(file)

    for declaration in declarations.enums:
        descriptor = declaration.descriptor
        table = Table(
            title=f"{descriptor.name} -> {descriptor.group_enum}",
            show_header=True,
            header_style="bold",
        )
        table.add_column("Group", style="cyan")
        table.add_column("Variants")
        table.add_column("Predicate", style="green")
        table.add_column("Destructure")

        for group in descriptor.groups:
            variants = ", ".join(f"{v.name}{v.payload.describe()}" for v in group.variants)
            table.add_row(
                group.name,
                escape(variants) if variants else "[red](empty)[/red]",
                predicate_name(group.name),
                "yes" if group.destructure else "no",
            )
        console.print(table)

        for request in declaration.dispatches:
            console.print(f"  dispatch [bold]{request.name}[/bold]")
            for group, ref in request.handlers.items():
                console.print(escape(f"    {group} -> {ref}"))
        console.print(f"  module: {declaration.module_name}")
