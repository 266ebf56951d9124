"""
JSON emission of declaration records.

The abstract declarations are pydantic models, so the JSON form is their
serialization. Useful for feeding other emitters or inspecting what the
generator produced.
"""

from __future__ import annotations

from enumgroup.core import ir


def render_json(module: ir.GeneratedModule) -> str:
    """Serialize a generated module's declarations as indented JSON."""
    return module.model_dump_json(indent=2) + "\n"
