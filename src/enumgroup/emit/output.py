"""
Writing rendered output to disk.

Shared by every emitter: output is rendered to text first, then written
or compared against what is already on disk.
"""

from __future__ import annotations

import logging
from pathlib import Path

from enumgroup.core.errors import EmitError

logger = logging.getLogger(__name__)


def write_source(source: str, path: Path) -> Path:
    """
    Write rendered text to a file, creating parent directories.

    Returns:
        Path written

    Raises:
        EmitError: If the file cannot be written
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(source, encoding="utf-8")
    except OSError as e:
        raise EmitError(f"Cannot write {path}: {e}") from e
    logger.info("Wrote %s", path)
    return path


def is_current(source: str, path: Path) -> bool:
    """Check whether a file already holds exactly this text."""
    if not path.exists():
        return False
    try:
        return path.read_text(encoding="utf-8") == source
    except OSError as e:
        raise EmitError(f"Cannot read {path}: {e}") from e
