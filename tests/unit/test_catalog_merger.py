"""
Unit tests for the catalog merger.

Run: pytest tests/unit/test_catalog_merger.py -v
"""

from models.shipping_resource import Dimensions, ResourceKind, WeightLimits
from services.catalog_merger import (
    dedupe_catalog,
    sort_resources,
    sync_partition,
    sync_partitions,
)
from tests.factories import ProviderItemFactory, ResourceFactory, sequential_ids


class TestSyncPartitionNewItems:
    """New catalog entries become provider resources"""

    def test_adds_fixed_box_enabled(self):
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", name="Medium Flat Rate Box")]

        result = sync_partition("wh-a", [], catalog, id_factory=sequential_ids())

        assert len(result.resources) == 1
        box = result.resources[0]
        assert box.id == "prv-1"
        assert box.is_active is True
        assert box.is_editable is False
        assert box.needs_completion is False
        assert result.added == ["prv-1"]

    def test_editable_box_without_dimensions_starts_disabled(self):
        catalog = [ProviderItemFactory.box("PACKAGE", dimensions=(0, 0, 0), is_editable=True)]

        result = sync_partition("wh-a", [], catalog, id_factory=sequential_ids())

        box = result.resources[0]
        assert box.needs_completion is True
        assert box.is_active is False

    def test_duplicate_catalog_entries_create_one_resource(self):
        catalog = [
            ProviderItemFactory.box("FLAT_RATE_BOX", name="First"),
            ProviderItemFactory.box("FLAT_RATE_BOX", name="Second"),
        ]

        result = sync_partition("wh-a", [], catalog, id_factory=sequential_ids())

        assert [r.name for r in result.resources] == ["First"]


class TestSyncPartitionMatched:
    """Existing provider resources are refreshed in place"""

    def test_keeps_id_and_user_state(self):
        existing = ResourceFactory.provider_box(
            "prv-old", "FLAT_RATE_BOX", name="Old Name", is_active=False, cost=1.25
        )
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", name="New Name")]

        result = sync_partition("wh-a", [existing], catalog, id_factory=sequential_ids())

        box = result.resources[0]
        assert box.id == "prv-old"
        assert box.name == "New Name"
        assert box.is_active is False
        assert box.cost == 1.25
        assert result.updated == ["prv-old"]
        assert result.added == []

    def test_keeps_tare_weight_refreshes_max_weight(self):
        existing = ResourceFactory.provider_box(
            "prv-1", "FLAT_RATE_BOX",
            weight=WeightLimits(max_weight=50, tare_weight=0.4),
        )
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", name="Flat Rate Box", max_weight=70)]

        result = sync_partition("wh-a", [existing], catalog)

        assert result.resources[0].weight.max_weight == 70
        assert result.resources[0].weight.tare_weight == 0.4

    def test_editable_box_keeps_user_dimensions(self):
        existing = ResourceFactory.provider_box(
            "prv-1", "PACKAGE", dimensions=(14, 12, 9), is_editable=True
        )
        catalog = [ProviderItemFactory.box("PACKAGE", name="Package", dimensions=(0, 0, 0), is_editable=True)]

        result = sync_partition("wh-a", [existing], catalog)

        box = result.resources[0]
        assert box.dimensions == Dimensions(length=14, width=12, height=9)
        assert box.needs_completion is False

    def test_editable_box_with_partial_dimensions_adopts_carrier(self):
        existing = ResourceFactory.provider_box(
            "prv-1", "PACKAGE", dimensions=(14, 0, 9), is_editable=True
        )
        catalog = [ProviderItemFactory.box("PACKAGE", name="Package", dimensions=(10, 10, 10), is_editable=True)]

        result = sync_partition("wh-a", [existing], catalog)

        assert result.resources[0].dimensions == Dimensions(length=10, width=10, height=10)

    def test_fixed_box_takes_carrier_dimensions(self):
        existing = ResourceFactory.provider_box("prv-1", "FLAT_RATE_BOX", dimensions=(1, 1, 1))
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", dimensions=(11, 8.5, 5.5))]

        result = sync_partition("wh-a", [existing], catalog)

        assert result.resources[0].dimensions == Dimensions(length=11, width=8.5, height=5.5)


class TestSyncPartitionUnmatched:
    """Resources the catalog no longer lists"""

    def test_custom_resources_survive_unchanged(self):
        custom = ResourceFactory.custom("custom-1", name="My Box", is_active=False)
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX")]

        result = sync_partition("wh-a", [custom], catalog, id_factory=sequential_ids())

        assert custom in result.resources
        assert result.retained == ["custom-1"]

    def test_orphaned_fixed_provider_is_dropped(self):
        gone = ResourceFactory.provider_box("prv-old", "DISCONTINUED_BOX")
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX")]

        result = sync_partition("wh-a", [gone], catalog, id_factory=sequential_ids())

        assert all(r.id != "prv-old" for r in result.resources)
        assert result.dropped == ["prv-old"]

    def test_orphaned_editable_provider_is_retained(self):
        configured = ResourceFactory.provider_box(
            "prv-1", "PACKAGE", dimensions=(14, 12, 9), is_editable=True
        )
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX")]

        result = sync_partition("wh-a", [configured], catalog, id_factory=sequential_ids())

        assert configured in result.resources

    def test_other_carriers_are_retained_when_scoped(self):
        ups = ResourceFactory.provider_box("prv-ups", "UPS_BOX", carrier="UPS", mail_class="GROUND")
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX")]

        result = sync_partition(
            "wh-a", [ups], catalog, synced_carriers=["USPS"], id_factory=sequential_ids()
        )

        assert ups in result.resources
        assert result.dropped == []

    def test_other_carriers_are_dropped_without_scope(self):
        ups = ResourceFactory.provider_box("prv-ups", "UPS_BOX", carrier="UPS", mail_class="GROUND")
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX")]

        result = sync_partition("wh-a", [ups], catalog, id_factory=sequential_ids())

        assert result.dropped == ["prv-ups"]


class TestSyncPartitionProperties:
    """Idempotence, purity and ordering"""

    def test_second_sync_changes_nothing(self):
        existing = [
            ResourceFactory.custom("custom-1", name="Zebra Box"),
            ResourceFactory.provider_box("prv-x", "PACKAGE", dimensions=(14, 12, 9), is_editable=True),
        ]
        catalog = [
            ProviderItemFactory.box("FLAT_RATE_BOX", name="Medium Flat Rate Box"),
            ProviderItemFactory.box("PACKAGE", name="Package", dimensions=(0, 0, 0), is_editable=True),
            ProviderItemFactory.box("FLAT_RATE_ENVELOPE", name="Flat Rate Envelope", dimensions=(12.5, 9.5, 0.5)),
        ]

        first = sync_partition("wh-a", existing, catalog, id_factory=sequential_ids())
        second = sync_partition("wh-a", first.resources, catalog, id_factory=sequential_ids())

        assert second.resources == first.resources
        assert second.changed is False

    def test_inputs_are_not_mutated(self):
        existing = ResourceFactory.provider_box("prv-1", "FLAT_RATE_BOX", name="Old")
        snapshot = existing.model_copy(deep=True)
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", name="New")]

        sync_partition("wh-a", [existing], catalog)

        assert existing == snapshot

    def test_output_sorted_by_name_case_insensitively(self):
        catalog = [
            ProviderItemFactory.box("B", name="zeta"),
            ProviderItemFactory.box("A", name="Alpha"),
            ProviderItemFactory.box("C", name="beta"),
        ]

        result = sync_partition("wh-a", [], catalog, id_factory=sequential_ids())

        assert [r.name for r in result.resources] == ["Alpha", "beta", "zeta"]

    def test_sort_breaks_name_ties_by_id(self):
        a = ResourceFactory.custom("custom-2", name="Same")
        b = ResourceFactory.custom("custom-1", name="Same")

        assert [r.id for r in sort_resources([a, b])] == ["custom-1", "custom-2"]

    def test_dedupe_keeps_first(self):
        first = ProviderItemFactory.service("PRIORITY_MAIL", name="Priority")
        second = ProviderItemFactory.service("PRIORITY_MAIL", name="Priority Again")

        assert dedupe_catalog([first, second]) == [first]


class TestSyncPartitions:
    """Tests for sync_partitions()"""

    def test_writes_only_changed_partitions(self):
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", name="Flat Rate Box")]
        synced, _ = sync_partitions({}, ["wh-a"], ResourceKind.BOX, catalog, id_factory=sequential_ids())
        snapshot = {"wh-a": synced[0].resources, "wh-b": []}

        results, writes = sync_partitions(
            snapshot, ["wh-a", "wh-b"], ResourceKind.BOX, catalog, id_factory=sequential_ids()
        )

        assert len(results) == 2
        assert [w.partition_id for w in writes] == ["wh-b"]

    def test_ignores_catalog_entries_of_other_kind(self):
        catalog = [
            ProviderItemFactory.box("FLAT_RATE_BOX"),
            ProviderItemFactory.service("PRIORITY_MAIL"),
        ]

        _, writes = sync_partitions({}, ["wh-a"], ResourceKind.SERVICE, catalog, id_factory=sequential_ids())

        assert [r.kind for r in writes[0].resources] == [ResourceKind.SERVICE]

    def test_partitions_merge_independently(self):
        """A disabled box in one warehouse does not affect the other."""
        catalog = [ProviderItemFactory.box("FLAT_RATE_BOX", name="Flat Rate Box")]
        snapshot = {
            "wh-a": [ResourceFactory.provider_box("prv-a", "FLAT_RATE_BOX", name="Flat Rate Box", is_active=False)],
            "wh-b": [ResourceFactory.provider_box("prv-b", "FLAT_RATE_BOX", name="Flat Rate Box", is_active=True)],
        }

        results, writes = sync_partitions(snapshot, ["wh-a", "wh-b"], ResourceKind.BOX, catalog)

        assert writes == []
        assert results[0].resources[0].is_active is False
        assert results[1].resources[0].is_active is True
