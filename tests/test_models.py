"""
Tests for building entries from raw records and the bucket factories.
"""

import pytest

from district_stats.models import (
    district_entry_from_record,
    get_or_create,
    new_district_summary,
    new_profile_summary,
    new_user_counts,
    node_entry_from_facts,
)


class TestNodeEntryFromFacts:
    """Test converting node facts."""

    def test_active_gears_derived(self) -> None:
        """Test active gears come from the active usage percentage."""
        node = node_entry_from_facts("node1.example.com", {
            "node_profile": "small",
            "district_uuid": "d1",
            "district_active": "true",
            "max_active_gears": 80,
            "gears_active_usage_pct": 25.0,
            "gears_total_count": 30,
            "max_gears": 100,
            "gears_usage_pct": 30.0,
        })

        assert node.id == "node1.example.com"
        assert node.name == "node1"
        assert node.active_gears == 20
        assert node.inactive_gears == 10
        assert node.total_gears == node.active_gears + node.inactive_gears
        assert node.available_active_gears == 60
        assert node.district_active is True

    def test_no_district(self) -> None:
        """Test the NONE district marker means no district."""
        node = node_entry_from_facts("node2", {"district_uuid": "NONE"})

        assert node.district_uuid is None
        assert node.active_gears == 0
        assert node.node_profile == "unknown"

    def test_null_profile(self) -> None:
        """Test a null profile is reported as unknown."""
        assert node_entry_from_facts("node3", {"node_profile": None}).node_profile == "unknown"

    def test_non_object_facts(self) -> None:
        """Test facts that are not an object are rejected with ValueError."""
        with pytest.raises(ValueError):
            node_entry_from_facts("node4", ["not", "a", "dict"])


class TestDistrictEntryFromRecord:
    """Test converting broker district records."""

    def test_record(self) -> None:
        """Test server membership and capacity fields."""
        entry = district_entry_from_record({
            "uuid": "d1",
            "name": "east",
            "gear_size": "small",
            "servers": [{"name": "n1", "active": True}, {"name": "n2", "active": False}],
            "max_capacity": 6000,
            "available_capacity": 5800,
            "available_uids": [1001, 1002, 1003],
        })

        assert entry.nodes == {"n1": True, "n2": False}
        assert entry.profile == "small"
        assert entry.district_capacity == 6000
        assert entry.dist_avail_capacity == 5800
        assert entry.dist_avail_uids == 3

    def test_uid_count(self) -> None:
        """Test a pre-counted uid pool size."""
        entry = district_entry_from_record({"uuid": "d2", "available_uid_count": 42})

        assert entry.dist_avail_uids == 42
        assert entry.name == "d2"
        assert entry.nodes == {}


class TestFactories:
    """Test creation on first lookup."""

    def test_get_or_create_once(self) -> None:
        """Test the factory runs only for a missing key."""
        buckets = {}
        first = get_or_create(buckets, "small", new_profile_summary)
        first.district_count = 3
        second = get_or_create(buckets, "small", new_profile_summary)

        assert second is first
        assert second.district_count == 3

    def test_district_summary_seeded_missing(self, make_district) -> None:
        """Test a new district summary starts with all members missing."""
        summary = new_district_summary(make_district("D", ["C", "A", "B"]))

        assert summary.missing_nodes == ["A", "B", "C"]
        assert summary.nodes_count == 0

    def test_user_counts(self) -> None:
        """Test an empty user tally."""
        counts = new_user_counts("alice")

        assert counts.login == "alice"
        assert counts.total_gears == 0
        assert counts.to_dict()["gears_by_profile"] == {}
