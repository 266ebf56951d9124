"""Tests for the enumgroup descriptor model and builder."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from enumgroup.core import DescriptorBuilder, ir
from enumgroup.core.builder import coerce_payload


class TestPayloadShape:
    """Test payload shapes and their compatibility."""

    def test_default_is_unit(self):
        shape = ir.PayloadShape()
        assert shape.kind == ir.PayloadKind.UNIT
        assert shape.attribute_names == []
        assert shape.describe() == "()"

    def test_single(self):
        shape = ir.PayloadShape.single("float")
        assert shape.kind == ir.PayloadKind.SINGLE
        assert shape.attribute_names == [ir.SINGLE_VALUE_ATTRIBUTE]
        assert shape.describe() == "(float)"

    def test_fields_keep_order(self):
        shape = ir.PayloadShape.of_fields(("major", "float"), ("minor", "float"))
        assert shape.attribute_names == ["major", "minor"]
        assert shape.describe() == "(major: float, minor: float)"

    def test_compatible_shapes(self):
        assert ir.PayloadShape.single("int").is_compatible(ir.PayloadShape.single("int"))
        assert ir.PayloadShape.unit().is_compatible(ir.PayloadShape.unit())
        assert ir.PayloadShape.of_fields(("a", "int")).is_compatible(
            ir.PayloadShape.of_fields(("a", "int"))
        )

    @pytest.mark.parametrize(
        "left,right",
        [
            (ir.PayloadShape.single("int"), ir.PayloadShape.single("str")),
            (ir.PayloadShape.unit(), ir.PayloadShape.single("int")),
            (
                ir.PayloadShape.of_fields(("a", "int"), ("b", "int")),
                ir.PayloadShape.of_fields(("b", "int"), ("a", "int")),
            ),
            (ir.PayloadShape.of_fields(("value", "int")), ir.PayloadShape.single("int")),
        ],
    )
    def test_incompatible_shapes(self, left, right):
        assert not left.is_compatible(right)

    def test_unit_rejects_type(self):
        with pytest.raises(PydanticValidationError, match="unit payload"):
            ir.PayloadShape(kind=ir.PayloadKind.UNIT, type_name="int")

    def test_single_requires_type(self):
        with pytest.raises(PydanticValidationError, match="single payload"):
            ir.PayloadShape(kind=ir.PayloadKind.SINGLE)

    def test_fields_require_fields(self):
        with pytest.raises(PydanticValidationError, match="at least one field"):
            ir.PayloadShape(kind=ir.PayloadKind.FIELDS)

    def test_duplicate_field_names_rejected(self):
        with pytest.raises(PydanticValidationError, match="duplicate payload field names: a"):
            ir.PayloadShape.of_fields(("a", "int"), ("a", "str"))


class TestGroupSpec:
    """Test that groups bind their variants."""

    def test_binds_owner(self):
        group = ir.GroupSpec(name="Round", variants=[ir.VariantSpec(name="Circle")])
        assert group.variants[0].group == "Round"
        assert group.variant_names() == ["Circle"]

    def test_binds_dict_variants(self):
        group = ir.GroupSpec.model_validate({"name": "Round", "variants": [{"name": "Circle"}]})
        assert group.variants[0].group == "Round"

    def test_rejects_foreign_owner(self):
        variant = ir.VariantSpec(name="Circle", group="Angular")
        with pytest.raises(PydanticValidationError, match="belongs to group 'Angular'"):
            ir.GroupSpec(name="Round", variants=[variant])

    def test_same_owner_accepted(self):
        variant = ir.VariantSpec(name="Circle", group="Round")
        group = ir.GroupSpec(name="Round", variants=[variant])
        assert group.get_variant("Circle") is not None
        assert group.get_variant("Square") is None

    def test_empty_group_constructible(self):
        assert ir.GroupSpec(name="Empty").variants == ()

    def test_frozen(self):
        group = ir.GroupSpec(name="Round")
        with pytest.raises(PydanticValidationError):
            group.name = "Other"


class TestEnumDescriptor:
    """Test descriptor accessors."""

    def test_default_group_enum(self, shape_descriptor: ir.EnumDescriptor):
        assert shape_descriptor.group_enum == "ShapeGroup"

    def test_explicit_group_enum(self):
        descriptor = ir.EnumDescriptor(name="WireMsg", group_enum="MsgKind")
        assert descriptor.group_enum == "MsgKind"

    def test_group_names_in_order(self, shape_descriptor: ir.EnumDescriptor):
        assert shape_descriptor.group_names() == ["Round", "Angular"]

    def test_variants_of(self, shape_descriptor: ir.EnumDescriptor):
        names = [v.name for v in shape_descriptor.variants_of("Angular")]
        assert names == ["Square", "Triangle"]

    def test_variants_of_unknown_group(self, shape_descriptor: ir.EnumDescriptor):
        with pytest.raises(KeyError):
            shape_descriptor.variants_of("Curvy")

    def test_all_variants_in_order(self, shape_descriptor: ir.EnumDescriptor):
        names = [v.name for v in shape_descriptor.all_variants()]
        assert names == ["Circle", "Ellipse", "Square", "Triangle"]

    def test_payload_of(self, shape_descriptor: ir.EnumDescriptor):
        assert shape_descriptor.payload_of("Circle") == ir.PayloadShape.single("float")
        with pytest.raises(KeyError):
            shape_descriptor.payload_of("Hexagon")

    def test_collections_are_tuples(self, shape_descriptor: ir.EnumDescriptor):
        assert isinstance(shape_descriptor.groups, tuple)
        assert isinstance(shape_descriptor.groups[0].variants, tuple)
        assert isinstance(shape_descriptor.payload_of("Ellipse").fields, tuple)
        with pytest.raises(AttributeError):
            shape_descriptor.groups[0].variants.append(ir.VariantSpec(name="Oval"))

    def test_decorators_normalized(self):
        descriptor = ir.EnumDescriptor(name="Event", decorators=["@register", "  final "])
        assert descriptor.decorators == ("register", "final")
        variant = ir.VariantSpec(name="Started", decorators=["@ versioned(2)"])
        assert variant.decorators == ("versioned(2)",)

    @pytest.mark.parametrize("decorator", ["", "  ", "@"])
    def test_empty_decorator_rejected(self, decorator: str):
        with pytest.raises(PydanticValidationError, match="decorator expression is empty"):
            ir.VariantSpec(name="Started", decorators=[decorator])

    def test_get_group(self, shape_descriptor: ir.EnumDescriptor):
        group = shape_descriptor.get_group("Round")
        assert group is not None
        assert group.variant_names() == ["Circle", "Ellipse"]
        assert shape_descriptor.get_group("Curvy") is None


class TestDescriptorBuilder:
    """Test the fluent builder."""

    def test_builds_groups_and_variants(self, shape_descriptor: ir.EnumDescriptor):
        triangle = shape_descriptor.get_variant("Triangle")
        assert triangle is not None
        assert triangle.group == "Angular"
        assert triangle.payload.attribute_names == ["a", "b", "c"]
        assert shape_descriptor.doc == "Plane shapes."

    def test_variant_before_group(self):
        with pytest.raises(ValueError, match="before any group"):
            DescriptorBuilder("Shape").variant("Circle")

    def test_group_options(self):
        descriptor = (
            DescriptorBuilder("Msg", group_enum="MsgKind")
            .group("Control", destructure=True, doc="Control frames.")
            .variant("Ping")
            .imports("from decimal import Decimal")
            .build()
        )
        group = descriptor.groups[0]
        assert group.destructure
        assert group.doc == "Control frames."
        assert descriptor.group_enum == "MsgKind"
        assert descriptor.imports == ("from decimal import Decimal",)

    def test_coerce_payload(self):
        assert coerce_payload(None) == ir.PayloadShape.unit()
        assert coerce_payload("int") == ir.PayloadShape.single("int")
        assert coerce_payload({"x": "int"}) == ir.PayloadShape.of_fields(("x", "int"))
        shape = ir.PayloadShape.single("str")
        assert coerce_payload(shape) is shape


class TestDispatchRequest:
    """Test handler references."""

    def test_parse_reference(self):
        ref = ir.HandlerRef.parse("pkg.handlers:on_round")
        assert ref is not None
        assert ref.module == "pkg.handlers"
        assert ref.attribute == "on_round"
        assert str(ref) == "pkg.handlers:on_round"

    @pytest.mark.parametrize(
        "ref", ["on_round", "pkg.handlers.on_round", "pkg:", ":on_round", "pkg:a:b", "1pkg:x"]
    )
    def test_malformed_reference(self, ref: str):
        assert ir.HandlerRef.parse(ref) is None
