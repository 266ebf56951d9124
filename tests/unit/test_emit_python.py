"""
Tests for the Python emission adapter.

Generated modules are written to disk and imported, so these tests check
the behavior of the emitted code, not just its text.
"""

import dataclasses
import json
from decimal import Decimal
from pathlib import Path

import pytest

from enumgroup.core import DescriptorBuilder, EmitError, ir, run_pipeline
from enumgroup.emit import (
    PythonEmitter,
    is_up_to_date,
    render_json,
    render_module,
    write_module,
    write_source,
)
from enumgroup.emit.python import HEADER_END, HEADER_START

HANDLERS_SOURCE = '''
def on_round(value):
    return f"round:{type(value).__name__}"


def on_angular(value):
    return f"angular:{type(value).__name__}"
'''

REGISTRY_SOURCE = '''
REGISTERED = []


def register(cls):
    REGISTERED.append(cls.__name__)
    return cls
'''

SHAPE_DISPATCH = ir.DispatchRequest(
    name="describe",
    handlers={"Round": "shape_handlers:on_round", "Angular": "shape_handlers:on_angular"},
)


@pytest.fixture
def shape_module(shape_descriptor: ir.EnumDescriptor) -> ir.GeneratedModule:
    return run_pipeline(shape_descriptor)


@pytest.fixture
def shapes(shape_module: ir.GeneratedModule, load_generated):
    """The generated Shape module, imported."""
    return load_generated(render_module(shape_module), "shape_groups")


class TestRenderedText:
    """Test the text of rendered modules."""

    def test_header(self, shape_module: ir.GeneratedModule):
        source = render_module(shape_module, header="Regenerate with: make enums")
        lines = source.splitlines()
        assert lines[0] == HEADER_START
        assert "# Groups:" in lines
        assert "#   - Round: Circle, Ellipse" in lines
        assert "#   - Angular: Square, Triangle" in lines
        assert "# Regenerate with: make enums" in lines
        assert HEADER_END in lines

    def test_compiles(self, shape_module: ir.GeneratedModule):
        compile(render_module(shape_module), "shape_groups.py", "exec")

    def test_deterministic(self, shape_module: ir.GeneratedModule):
        assert render_module(shape_module) == PythonEmitter().render(shape_module)

    def test_only_needed_imports(self, shape_descriptor: ir.EnumDescriptor):
        module = run_pipeline(shape_descriptor, artifacts=[ir.Artifact.GROUP_ENUM])
        source = render_module(module)
        assert "from enum import Enum" in source
        assert "dataclass" not in source
        assert "TypeVar" not in source
        assert "def group_of" not in source

    def test_dispatch_imports_handlers_lazily(self, shape_descriptor: ir.EnumDescriptor):
        module = run_pipeline(shape_descriptor, dispatches=[SHAPE_DISPATCH])
        source = render_module(module)
        assert "from shape_handlers import on_round as _round_handler" in source
        # Not at module level.
        assert "\nfrom shape_handlers" not in source

    def test_invalid_handler_reference(self):
        decl = ir.FunctionDecl(
            artifact=ir.Artifact.DISPATCH,
            name="describe",
            function=ir.FunctionKind.DISPATCH,
            params=[ir.Parameter(name="value", role=ir.ParamRole.VALUE, type_ref="Shape")],
            returns="handler_result",
            table=ir.DispatchTable(
                key=ir.TableKey.GROUP, arms=[ir.DispatchArm(match="Round", handler="bad")]
            ),
        )
        module = ir.GeneratedModule(enum_name="Shape", group_enum="ShapeGroup", declarations=[decl])
        with pytest.raises(EmitError, match="Invalid handler reference 'bad'"):
            render_module(module)


class TestGeneratedModule:
    """Test the behavior of the imported Shape module."""

    def test_exports(self, shapes, shape_module: ir.GeneratedModule):
        assert shapes.__all__ == shape_module.names()

    def test_group_enum(self, shapes):
        assert [member.name for member in shapes.ShapeGroup] == ["Round", "Angular"]
        assert shapes.ShapeGroup.Round.value == "Round"

    def test_class_hierarchy(self, shapes):
        circle = shapes.Circle(1.0)
        assert isinstance(circle, shapes.Round)
        assert isinstance(circle, shapes.Shape)
        assert not isinstance(circle, shapes.Angular)
        assert shapes.Shape.__doc__ == "Plane shapes."

    def test_variants_are_frozen_values(self, shapes):
        square = shapes.Square(2.0)
        assert square == shapes.Square(2.0)
        assert square.value == 2.0
        with pytest.raises(dataclasses.FrozenInstanceError):
            square.value = 3.0

    def test_group_of(self, shapes):
        assert shapes.group_of(shapes.Circle(1.0)) is shapes.ShapeGroup.Round
        assert shapes.group_of(shapes.Ellipse(2.0, 1.0)) is shapes.ShapeGroup.Round
        assert shapes.group_of(shapes.Square(1.0)) is shapes.ShapeGroup.Angular
        assert shapes.group_of(shapes.Triangle(3.0, 4.0, 5.0)) is shapes.ShapeGroup.Angular

    def test_group_of_rejects_other_values(self, shapes):
        with pytest.raises(TypeError, match="is not a Shape variant"):
            shapes.group_of("circle")

    def test_variants_of(self, shapes):
        assert shapes.variants_of(shapes.ShapeGroup.Round) == (shapes.Circle, shapes.Ellipse)
        assert shapes.variants_of(shapes.ShapeGroup.Angular) == (
            shapes.Square,
            shapes.Triangle,
        )

    def test_group_of_and_variants_of_agree(self, shapes):
        values = [
            shapes.Circle(1.0),
            shapes.Ellipse(2.0, 1.0),
            shapes.Square(1.0),
            shapes.Triangle(3.0, 4.0, 5.0),
        ]
        for value in values:
            assert type(value) in shapes.variants_of(shapes.group_of(value))

    def test_predicates(self, shapes):
        triangle = shapes.Triangle(3.0, 4.0, 5.0)
        assert shapes.is_angular(triangle)
        assert not shapes.is_round(triangle)
        assert shapes.is_round(shapes.Circle(1.0))

    def test_match_group(self, shapes):
        def describe(value):
            return shapes.match_group(
                value,
                round=lambda shape: f"round {type(shape).__name__}",
                angular=lambda shape: f"angular {type(shape).__name__}",
            )

        assert describe(shapes.Ellipse(2.0, 1.0)) == "round Ellipse"
        assert describe(shapes.Triangle(3.0, 4.0, 5.0)) == "angular Triangle"

    def test_match_group_requires_every_handler(self, shapes):
        with pytest.raises(TypeError):
            shapes.match_group(shapes.Circle(1.0), round=lambda shape: shape)


class TestDispatchFunctions:
    """Test generated dispatch functions."""

    def test_dispatch_calls_group_handler(self, shape_descriptor, load_generated):
        load_generated(HANDLERS_SOURCE, "shape_handlers")
        module = run_pipeline(shape_descriptor, dispatches=[SHAPE_DISPATCH])
        shapes = load_generated(render_module(module), "shape_dispatch")

        assert shapes.describe(shapes.Circle(1.0)) == "round:Circle"
        assert shapes.describe(shapes.Square(2.0)) == "angular:Square"

    def test_destructured_payloads(self, message_descriptor, load_generated):
        messages = load_generated(render_module(run_pipeline(message_descriptor)), "wire_msg")

        def handle(value):
            return messages.match_group(
                value,
                data=lambda payload: f"data {payload!r}",
                control=lambda: "control",
                routing=lambda target, hops: f"route {target} x{hops}",
            )

        assert handle(messages.Text("hi")) == "data 'hi'"
        assert handle(messages.Binary(b"\x00")) == "data b'\\x00'"
        assert handle(messages.Pong()) == "control"
        assert handle(messages.Reply(target="node", hops=2)) == "route node x2"

    def test_keyword_group_names(self, load_generated):
        descriptor = (
            DescriptorBuilder("Token")
            .group("Class")
            .variant("Keyword", "str")
            .group("Match")
            .variant("Pattern", "str")
            .build()
        )
        tokens = load_generated(render_module(run_pipeline(descriptor)), "token_groups")

        result = tokens.match_group(
            tokens.Pattern("x"), class_=lambda t: "class", match_=lambda t: "match"
        )
        assert result == "match"


class TestPassThrough:
    """Test docs and imports that flow into the generated module."""

    def test_imports_and_payload_types(self, load_generated):
        descriptor = (
            DescriptorBuilder("Money")
            .imports("from decimal import Decimal")
            .group("Cash")
            .variant("Price", "Decimal")
            .build()
        )
        money = load_generated(render_module(run_pipeline(descriptor)), "money_groups")
        assert money.Price(Decimal("1.50")).value == Decimal("1.50")
        assert money.is_cash(money.Price(Decimal("0")))

    def test_quotes_in_docs(self, load_generated):
        descriptor = (
            DescriptorBuilder("Msg", doc='Messages, "quoted" \\ escaped')
            .group("A")
            .variant("X")
            .build()
        )
        messages = load_generated(render_module(run_pipeline(descriptor)), "msg_groups")
        assert messages.Msg.__doc__ == 'Messages, "quoted" \\ escaped'

    def test_decorators(self, load_generated):
        registry = load_generated(REGISTRY_SOURCE, "event_registry")
        descriptor = (
            DescriptorBuilder("Event", decorators=["register"])
            .imports("from typing import final", "from event_registry import register")
            .group("Lifecycle")
            .variant("Started", {"at": "int"}, decorators=["@final"])
            .variant("Stopped")
            .build()
        )
        source = render_module(run_pipeline(descriptor))
        assert "@register\n@final\n@dataclass(frozen=True)\nclass Started(Lifecycle):" in source

        events = load_generated(source, "event_groups")
        assert registry.REGISTERED == ["Event", "Lifecycle", "Started", "Stopped"]
        assert events.Started.__final__ is True
        assert not hasattr(events.Stopped, "__final__")
        assert dataclasses.is_dataclass(events.Started)
        with pytest.raises(dataclasses.FrozenInstanceError):
            events.Started(at=1).at = 2
        assert events.group_of(events.Started(at=1)) == events.EventGroup.Lifecycle


class TestOutput:
    """Test writing generated modules."""

    def test_write_and_check(self, shape_module: ir.GeneratedModule, tmp_path: Path):
        path = tmp_path / "out" / "shape_groups.py"
        assert not is_up_to_date(shape_module, path)

        assert write_module(shape_module, path) == path
        assert is_up_to_date(shape_module, path)

        path.write_text(path.read_text() + "# edited\n")
        assert not is_up_to_date(shape_module, path)

    def test_write_failure(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        with pytest.raises(EmitError, match="Cannot write"):
            write_source("x = 1\n", blocker / "module.py")

    def test_render_json(self, shape_module: ir.GeneratedModule):
        data = json.loads(render_json(shape_module))
        assert data["enum_name"] == "Shape"
        assert [d["name"] for d in data["declarations"]] == shape_module.names()
        assert data["declarations"][0]["kind"] == "detailed_type"
