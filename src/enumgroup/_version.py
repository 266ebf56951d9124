"""Version lookup for enumgroup."""

import tomllib
from importlib import metadata
from pathlib import Path

DISTRIBUTION = "enumgroup"
UNKNOWN_VERSION = "0.0.0"

# Present only when running from a source checkout.
_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def _checkout_version() -> str | None:
    if not _PYPROJECT.is_file():
        return None
    with _PYPROJECT.open("rb") as f:
        project = tomllib.load(f).get("project", {})
    if project.get("name") != DISTRIBUTION:
        return None
    return project.get("version")


def get_version() -> str:
    """
    Return the enumgroup version.

    A source checkout reports the version in its pyproject.toml, so editable
    installs never show stale metadata. Otherwise the installed distribution
    metadata is used.
    """
    version = _checkout_version()
    if version:
        return version
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        return UNKNOWN_VERSION
