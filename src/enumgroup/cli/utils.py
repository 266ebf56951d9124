"""
enumgroup CLI utilities.

Shared helpers used across CLI modules.
"""

import platform
from collections.abc import Sequence
from pathlib import Path

import typer

from enumgroup._version import get_version
from enumgroup.core import ir
from enumgroup.core.errors import EnumGroupError, GenerationError, ValidationError


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"enumgroup version {get_version()}")
        typer.echo("")
        typer.echo("Environment:")
        typer.echo(
            f"  Python:        {platform.python_implementation()} {platform.python_version()}"
        )
        typer.echo(f"  Platform:      {platform.system()} {platform.release()}")
        typer.echo(f"  Location:      {Path(__file__).resolve().parent.parent}")
        raise typer.Exit()


def print_issues(issues: Sequence[ir.Diagnostic]) -> None:
    """Print diagnostics one per line on stderr."""
    for issue in issues:
        typer.echo(f"ERROR: {issue.format()}", err=True)


def print_error(error: EnumGroupError) -> None:
    """Print an enumgroup error, expanding issue lists when it carries them."""
    if isinstance(error, ValidationError | GenerationError):
        if error.context:
            typer.echo(error.context.format(), err=True)
        print_issues(error.issues)
    else:
        typer.echo(f"Error: {error}", err=True)
