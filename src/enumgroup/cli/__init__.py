"""
enumgroup CLI Package.

- commands.py: validate, generate and inspect commands
- utils.py: shared utilities

Global options (``--version``, ``--log-level``) live on the main callback.
"""

from typing import Annotated

import typer

from enumgroup.cli.commands import generate_command, inspect_command, validate_command
from enumgroup.cli.utils import version_callback
from enumgroup.core.config import ENUMGROUP_LOG_LEVEL_VAR, configure_logging

app = typer.Typer(
    help="""enumgroup - grouped enums for Python

Declare a detailed enum and its groups in TOML, then generate the group
enum, conversions, predicates and grouped-match dispatch functions.
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and environment information",
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help=f"Log level (DEBUG, INFO, WARNING, ERROR); defaults to ${ENUMGROUP_LOG_LEVEL_VAR}",
        ),
    ] = None,
) -> None:
    """enumgroup CLI main callback for global options."""
    configure_logging(log_level)


app.command(name="validate")(validate_command)
app.command(name="generate")(generate_command)
app.command(name="inspect")(inspect_command)


def main(argv: list[str] | None = None) -> None:
    app(args=argv)


__all__ = [
    "app",
    "main",
    "version_callback",
]
