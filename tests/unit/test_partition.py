"""Tests for group partitioning."""

import dataclasses

import pytest

from enumgroup.core import PreconditionError, ensure_valid, ir, partition


class TestPartition:
    """Test the partition index built from a validated descriptor."""

    @pytest.fixture
    def index(self, shape_descriptor: ir.EnumDescriptor):
        return partition(ensure_valid(shape_descriptor))

    def test_names(self, index):
        assert index.enum_name == "Shape"
        assert index.group_enum == "ShapeGroup"

    def test_group_of(self, index):
        assert index.group_of("Circle") == "Round"
        assert index.group_of("Ellipse") == "Round"
        assert index.group_of("Square") == "Angular"
        assert index.group_of("Triangle") == "Angular"

    def test_variants_of_preserves_order(self, index):
        assert index.variants_of("Round") == ("Circle", "Ellipse")
        assert index.variants_of("Angular") == ("Square", "Triangle")

    def test_groups_and_variants_in_declaration_order(self, index):
        assert index.groups == ("Round", "Angular")
        assert index.variants == ("Circle", "Ellipse", "Square", "Triangle")

    def test_partition_is_total_and_exclusive(self, index, shape_descriptor):
        declared = [v.name for v in shape_descriptor.all_variants()]
        assert sorted(index.group_by_variant) == sorted(declared)

        grouped = [v for group in index.groups for v in index.variants_of(group)]
        assert sorted(grouped) == sorted(declared)
        assert len(grouped) == len(set(grouped))

    def test_round_trip(self, index):
        for group in index.groups:
            for variant in index.variants_of(group):
                assert index.group_of(variant) == group

    def test_unknown_variant(self, index):
        with pytest.raises(KeyError):
            index.group_of("Hexagon")

    def test_index_is_read_only(self, index):
        with pytest.raises(TypeError):
            index.group_by_variant["Hexagon"] = "Angular"
        with pytest.raises(dataclasses.FrozenInstanceError):
            index.enum_name = "Other"

    def test_deterministic(self, shape_descriptor):
        first = partition(ensure_valid(shape_descriptor))
        second = partition(ensure_valid(shape_descriptor))
        assert dict(first.variants_by_group) == dict(second.variants_by_group)
        assert list(first.group_by_variant) == list(second.group_by_variant)

    def test_requires_validated_descriptor(self, shape_descriptor):
        with pytest.raises(PreconditionError, match="requires a ValidatedDescriptor"):
            partition(shape_descriptor)
