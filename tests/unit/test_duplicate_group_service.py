"""
Unit tests for duplicate groups.

Run: pytest tests/unit/test_duplicate_group_service.py -v
"""

from models.shipping_resource import ResourceKind, ResourceOrigin
from services.duplicate_group_service import (
    duplicate_across_partitions,
    duplicate_within_partition,
    plan_additions,
)
from services.resource_identity import key_of
from tests.factories import ResourceFactory, sequential_ids


class TestDuplicateAcrossPartitions:
    """Tests for duplicate_across_partitions()"""

    def test_one_copy_per_partition_sharing_group(self, partition_ids):
        source = ResourceFactory.provider_box("prv-1", "FLAT_RATE_BOX", name="Flat Rate Box")

        group = duplicate_across_partitions(source, partition_ids, id_factory=sequential_ids())

        assert group.group_id == "duplicate-group-1"
        assert group.partition_ids == partition_ids
        assert {m.duplicate_group_id for m in group.members.values()} == {"duplicate-group-1"}
        assert len({m.id for m in group.members.values()}) == 3

    def test_copies_are_custom_disabled_and_named(self, partition_ids):
        source = ResourceFactory.provider_box("prv-1", "FLAT_RATE_BOX", name="Flat Rate Box")

        group = duplicate_across_partitions(source, partition_ids, id_factory=sequential_ids())

        for copy in group.members.values():
            assert copy.origin == ResourceOrigin.CUSTOM
            assert copy.name == "Copy of Flat Rate Box"
            assert copy.is_active is False
            assert copy.is_editable is True
            assert copy.original_resource_id == "prv-1"
            assert copy.carrier == source.carrier
            assert copy.dimensions == source.dimensions

    def test_members_share_one_identity(self, partition_ids):
        source = ResourceFactory.custom("custom-1")

        group = duplicate_across_partitions(source, partition_ids, id_factory=sequential_ids())

        keys = {key_of(m) for m in group.members.values()}
        assert keys == {("group", group.group_id)}
        assert key_of(source) not in keys

    def test_copy_of_box_without_dimensions_needs_completion(self, partition_ids):
        source = ResourceFactory.provider_box(
            "prv-1", "PACKAGE", dimensions=(0, 0, 0), is_editable=True
        )

        group = duplicate_across_partitions(source, partition_ids)

        assert all(m.needs_completion for m in group.members.values())

    def test_long_name_is_not_prefixed_past_limit(self):
        source = ResourceFactory.custom("custom-1", name="x" * 250)

        group = duplicate_across_partitions(source, ["wh-a"])

        assert group.members["wh-a"].name == "x" * 250

    def test_source_is_not_modified(self, partition_ids):
        source = ResourceFactory.custom("custom-1", name="Mailer")
        before = source.model_copy(deep=True)

        duplicate_across_partitions(source, partition_ids)

        assert source == before


class TestDuplicateWithinPartition:
    """Tests for duplicate_within_partition()"""

    def test_copy_is_scoped_and_ungrouped(self):
        source = ResourceFactory.custom("custom-src", name="Mailer", duplicate_group_id="duplicate-group-9")

        copy = duplicate_within_partition(source, "wh-b", id_factory=sequential_ids())

        assert copy.id == "custom-1"
        assert copy.duplicate_group_id is None
        assert copy.partition_scope.is_specific
        assert copy.partition_scope.partition_id == "wh-b"
        assert copy.is_active is False

    def test_copy_has_its_own_identity(self):
        source = ResourceFactory.custom("custom-1")

        copy = duplicate_within_partition(source, "wh-a", id_factory=lambda prefix: f"{prefix}-copy")

        assert key_of(copy) == ("custom", "custom-copy")
        assert key_of(copy) != key_of(source)


class TestPlanAdditions:
    """Tests for plan_additions()"""

    def test_appends_to_existing_lists(self):
        existing = ResourceFactory.custom("custom-1")
        added = ResourceFactory.custom("custom-2")
        snapshot = {"wh-a": [existing]}

        writes = plan_additions(snapshot, {"wh-a": added, "wh-b": added}, ResourceKind.BOX)

        assert [w.partition_id for w in writes] == ["wh-a", "wh-b"]
        assert [r.id for r in writes[0].resources] == ["custom-1", "custom-2"]
        assert [r.id for r in writes[1].resources] == ["custom-2"]
        assert snapshot == {"wh-a": [existing]}
