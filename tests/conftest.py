"""Shared pytest fixtures for enumgroup tests."""

import importlib.util
import sys
from pathlib import Path
from types import ModuleType

import pytest

from enumgroup.core import DescriptorBuilder, ir

SHAPES_TOML = """
[generate]
output_dir = "generated"

[[enum]]
name = "Shape"
doc = "Plane shapes."

[[enum.groups]]
name = "Round"
variants = [
  { name = "Circle", payload = "float" },
  { name = "Ellipse", payload = "major: float, minor: float" },
]

[[enum.groups]]
name = "Angular"
variants = [
  { name = "Square", payload = "float" },
  { name = "Triangle", payload = "a: float, b: float, c: float" },
]

[[enum.dispatch]]
name = "describe"
handlers = { Round = "shape_handlers:on_round", Angular = "shape_handlers:on_angular" }
"""


@pytest.fixture
def shape_descriptor() -> ir.EnumDescriptor:
    """Shape: Round = [Circle, Ellipse], Angular = [Square, Triangle]."""
    return (
        DescriptorBuilder("Shape", doc="Plane shapes.")
        .group("Round")
        .variant("Circle", "float")
        .variant("Ellipse", {"major": "float", "minor": "float"})
        .group("Angular")
        .variant("Square", "float")
        .variant("Triangle", {"a": "float", "b": "float", "c": "float"})
        .build()
    )


@pytest.fixture
def message_descriptor() -> ir.EnumDescriptor:
    """Wire messages whose groups all receive destructured payloads."""
    return (
        DescriptorBuilder("WireMsg")
        .group("Data", destructure=True)
        .variant("Text", "str")
        .variant("Binary", "bytes")
        .group("Control", destructure=True)
        .variant("Ping")
        .variant("Pong")
        .group("Routing", destructure=True)
        .variant("Forward", {"target": "str", "hops": "int"})
        .variant("Reply", {"target": "str", "hops": "int"})
        .build()
    )


@pytest.fixture
def shapes_toml(tmp_path: Path) -> Path:
    """Write the Shape declarations to a file and return its path."""
    path = tmp_path / "shapes.toml"
    path.write_text(SHAPES_TOML)
    return path


@pytest.fixture
def load_generated(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Return a loader that writes source to disk and imports it as a module."""
    monkeypatch.syspath_prepend(str(tmp_path))

    def load(source: str, module_name: str) -> ModuleType:
        path = tmp_path / f"{module_name}.py"
        path.write_text(source)
        spec = importlib.util.spec_from_file_location(module_name, path)
        assert spec is not None and spec.loader is not None
        module = importlib.util.module_from_spec(spec)
        monkeypatch.setitem(sys.modules, module_name, module)
        spec.loader.exec_module(module)
        return module

    return load
