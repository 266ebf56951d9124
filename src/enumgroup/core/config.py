"""
Generation settings and logging configuration.

Settings come from the optional ``[generate]`` table of a declaration file
and can be overridden on the command line:

    [generate]
    output_dir = "src/myapp/generated"
    artifacts = ["group_enum", "group_of", "predicates"]
    header = "Regenerate with: enumgroup generate shapes.toml"

The log level is read from ENUMGROUP_LOG_LEVEL unless given explicitly.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from . import ir

ENUMGROUP_LOG_LEVEL_VAR = "ENUMGROUP_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

GENERATE_KEYS = frozenset({"output_dir", "artifacts", "header"})


@dataclass
class GeneratorConfig:
    """
    Settings for one generation run.

    Attributes:
        output_dir: Directory generated modules are written to
        artifacts: Artifacts to emit; None means all
        header: Extra line placed in the generated file header
    """

    output_dir: Path = field(default_factory=lambda: Path("."))
    artifacts: list[ir.Artifact] | None = None
    header: str | None = None

    def with_overrides(
        self,
        output_dir: Path | None = None,
        artifacts: list[ir.Artifact] | None = None,
    ) -> GeneratorConfig:
        """Return a copy with command-line overrides applied."""
        changes: dict[str, Any] = {}
        if output_dir is not None:
            changes["output_dir"] = output_dir
        if artifacts:
            changes["artifacts"] = list(artifacts)
        return dataclasses.replace(self, **changes)


def parse_artifacts(names: list[str]) -> list[ir.Artifact]:
    """
    Convert artifact names to Artifact values.

    Raises:
        ValueError: If a name is not a known artifact
    """
    artifacts = []
    for name in names:
        try:
            artifacts.append(ir.Artifact(name))
        except ValueError:
            valid = ", ".join(a.value for a in ir.Artifact)
            raise ValueError(f"Unknown artifact '{name}'. Valid artifacts: {valid}") from None
    return artifacts


def require_string_list(value: Any, what: str) -> list[str]:
    """
    Check that a declaration value is an array of strings.

    Raises:
        ValueError: If it is anything else (a bare string included)
    """
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{what} must be an array of strings")
    return list(value)


def load_generator_config(data: Any, base_dir: Path) -> GeneratorConfig:
    """
    Build a GeneratorConfig from a ``[generate]`` table.

    Args:
        data: The table contents (may be empty)
        base_dir: Directory relative output paths are resolved against

    Raises:
        ValueError: On malformed settings or unknown artifact names
    """
    if not isinstance(data, dict):
        raise ValueError("[generate] must be a table")
    unknown = sorted(set(data) - GENERATE_KEYS)
    if unknown:
        raise ValueError(f"Unknown key(s) in [generate]: {', '.join(unknown)}")

    output_dir_data = data.get("output_dir", ".")
    if not isinstance(output_dir_data, str):
        raise ValueError("[generate] output_dir must be a string")
    output_dir = Path(output_dir_data)
    if not output_dir.is_absolute():
        output_dir = base_dir / output_dir

    artifacts = None
    if "artifacts" in data:
        artifacts = parse_artifacts(
            require_string_list(data["artifacts"], "[generate] artifacts")
        )

    header = data.get("header")
    if header is not None and not isinstance(header, str):
        raise ValueError("[generate] header must be a string")

    return GeneratorConfig(output_dir=output_dir, artifacts=artifacts, header=header)


def get_log_level(override: str | None = None) -> str:
    """
    Resolve the log level.

    Resolution order: explicit override, ENUMGROUP_LOG_LEVEL, WARNING.
    Unknown values fall back to WARNING with a warning.
    """
    value = (override or os.environ.get(ENUMGROUP_LOG_LEVEL_VAR, "")).upper().strip()
    if not value:
        return DEFAULT_LOG_LEVEL
    if value not in LOG_LEVELS:
        logging.getLogger(__name__).warning(
            "Unknown log level '%s'. Valid values: %s. Defaulting to %s.",
            value,
            ", ".join(LOG_LEVELS),
            DEFAULT_LOG_LEVEL,
        )
        return DEFAULT_LOG_LEVEL
    return value


def configure_logging(override: str | None = None) -> None:
    level = get_log_level(override)
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT)
    logging.getLogger("enumgroup").setLevel(level)
