"""
Unit Tests: Consistent Hash Ring

Tests:
    - add/remove bookkeeping and weighting by repeated add
    - Lookup determinism, reassignment on add/remove, wraparound
    - Distinct-node walks
    - Empty-ring and absent-node results
    - Random placement exhaustion
    - Load balance across evenly spaced nodes
"""

import pytest

from hashring.core import constants as C
from hashring.core.config import RingConfig
from hashring.core.errors import ConfigurationError, PlacementError
from hashring.ring.consistent_hash import ConsistentHash


class TestAdd:
    """Tests for adding nodes."""

    def test_add_assigns_default_weight(self, ring):
        ring.add("a")
        points = ring.get_points("a")

        assert len(points) == C.DEFAULT_WEIGHT
        assert all(0 <= p < C.DEFAULT_RANGE for p in points)

    def test_add_n_points(self, ring):
        ring.add("a", 7)
        assert len(ring.get_points("a")) == 7

    def test_add_returns_ring(self, ring):
        assert ring.add("a") is ring
        assert ring.add("b").add("c") is ring

    def test_repeated_adds_add_points(self, ring):
        ring.add("a")
        ring.add("a", 7)
        ring.get("x")

        assert ring.point_count == C.DEFAULT_WEIGHT + 7
        assert len(ring.get_points("a")) == C.DEFAULT_WEIGHT + 7
        assert ring.get_nodes() == ["a", "a"]

    def test_distinct_points_across_nodes(self, ring):
        for i in range(20):
            ring.add(f"node-{i}")

        points = [p for i in range(20) for p in ring.get_points(f"node-{i}")]
        assert len(points) == len(set(points)) == 20 * C.DEFAULT_WEIGHT

    def test_explicit_points_used_verbatim(self, ring):
        ring.add("a", 1, [30, 10, 20])
        assert ring.get_points("a") == [30, 10, 20]
        assert ring.point_count == 3

    def test_explicit_points_are_copied(self, ring):
        points = [5, 6]
        ring.add("a", points=points)
        points.append(7)
        assert ring.get_points("a") == [5, 6]

    @pytest.mark.parametrize("weight", [-5, 2.5, "3", True])
    def test_invalid_weight_rejected(self, ring, weight):
        ring.add("a", 2)

        with pytest.raises(ConfigurationError) as excinfo:
            ring.add("n", weight)

        assert excinfo.value.context["option"] == "weight"
        assert ring.get_nodes() == ["a"]
        assert ring.point_count == 2

    def test_invalid_weight_rejected_uniform(self, uniform_config):
        ring = ConsistentHash(uniform_config)
        with pytest.raises(ConfigurationError):
            ring.add("n", -1)
        assert ring.pending_count == 0

    def test_zero_weight_uses_default(self, ring):
        ring.add("a", 0)
        assert len(ring.get_points("a")) == C.DEFAULT_WEIGHT

    def test_seeded_rings_place_identically(self):
        first = ConsistentHash(seed=42).add("a").add("b")
        second = ConsistentHash(seed=42).add("a").add("b")
        assert first.get_points("a") == second.get_points("a")
        assert first.get_points("b") == second.get_points("b")

    def test_non_string_nodes(self, ring):
        ring.add(("10.0.0.1", 6379), points=[100])
        ring.add(7, points=[200])

        assert ring.get("anything", 2) in (
            [("10.0.0.1", 6379), 7],
            [7, ("10.0.0.1", 6379)],
        )


class TestGet:
    """Tests for single-node lookup."""

    def test_returns_only_node(self, ring):
        ring.add("n1")
        assert ring.get(0) == "n1"

    def test_same_key_same_node(self, ring):
        ring.add("a")
        ring.add("b")
        assert ring.get("abc") == ring.get("abc")

    def test_fresh_instances_agree(self):
        """Identical explicit layouts give identical answers everywhere."""
        def build():
            ring = ConsistentHash()
            for i in range(10):
                ring.add(f"node-{i}", points=[i * 10000 + 17, i * 10000 + 5017])
            return ring

        first, second = build(), build()
        for i in range(1000):
            assert first.get(f"key-{i}") == second.get(f"key-{i}")

    def test_same_node_when_node_added_after(self, ring):
        ring.add("C", 1, [0x43])
        before = ring.get("A")
        ring.add("F", 1, [0x46])
        assert ring.get("A") == before == "C"

    def test_new_node_when_node_added_before(self, ring):
        ring.add("F", 1, [0x46])
        before = ring.get("A")
        ring.add("C", 1, [0x43])
        assert before == "F"
        assert ring.get("A") == "C"

    def test_same_node_after_deleting_other(self, ring):
        ring.add("C", 1, [0x43])
        ring.add("F", 1, [0x46])
        before = ring.get("A")
        ring.remove("F")
        assert ring.get("A") == before

    def test_reassigns_after_removing_owner(self, ring):
        ring.add("C", 1, [0x43])
        ring.add("F", 1, [0x46])
        before = ring.get("A")
        ring.remove("C")
        assert ring.get("A") != before
        assert ring.get("A") == "F"

    def test_resolves_to_successor_point(self, ring):
        # "A" sits at position 2080
        ring.add("low", points=[100])
        ring.add("exact", points=[2080])
        ring.add("high", points=[3000])
        assert ring.get("A") == "exact"

        ring.remove("exact")
        assert ring.get("A") == "high"

    def test_wraps_past_last_point(self, ring):
        ring.add("first", points=[10])
        ring.add("second", points=[20])
        assert ring.get("A") == "first"

    def test_empty_ring_returns_none(self):
        assert ConsistentHash().get("foo") is None

    def test_bytes_and_str_keys_agree(self, ring):
        ring.add("a").add("b").add("c")
        assert ring.get(b"user:1") == ring.get("user:1")


class TestGetCount:
    """Tests for distinct-node walks."""

    def test_count_distinct_nodes(self, ring, monkeypatch):
        ring.add("a", 1, [10])
        ring.add("b", 1, [7, 20, 30])
        monkeypatch.setattr(ConsistentHash, "_locate", lambda self, key: 2)

        assert ring.get("test", 3) == ["b", "a"]

        ring.add("c", 1, [15])
        assert ring.get("test", 3) == ["c", "b", "a"]

    def test_first_matches_get(self, ring):
        for i in range(8):
            ring.add(f"node-{i}")

        for i in range(300):
            key = f"object/{i}"
            nodes = ring.get(key, 3)
            assert len(nodes) == 3
            assert len(set(nodes)) == 3
            assert nodes[0] == ring.get(key)

    def test_count_larger_than_node_set(self, ring):
        ring.add("a").add("b")
        nodes = ring.get("key", 5)
        assert sorted(nodes) == ["a", "b"]

    def test_duplicate_entries_count_once(self, ring):
        ring.add("a").add("a").add("b")
        assert sorted(ring.get("key", 3)) == ["a", "b"]

    def test_walk_follows_ring_order(self, ring):
        # "A" sits at 2080: successors are 3000, 4000, then wrap to 10
        ring.add("w", points=[10])
        ring.add("x", points=[3000])
        ring.add("y", points=[4000])
        assert ring.get("A", 3) == ["x", "y", "w"]

    def test_empty_ring_returns_empty_list(self):
        assert ConsistentHash().get("foo", 3) == []

    def test_zero_count(self, ring):
        ring.add("a")
        assert ring.get("key", 0) == []


class TestRemove:
    """Tests for removing nodes."""

    def test_remove_unmaps_node(self, ring):
        ring.add("a")
        ring.remove("a")

        assert ring.get_points("a") is None
        assert ring.get("a") is None
        assert ring.point_count == 0

    def test_remove_returns_ring(self, ring):
        assert ring.remove("missing") is ring

    def test_remove_all_entries(self, ring):
        ring.add("node-a")
        ring.add("node-a")
        ring.add("node-b")
        ring.get("resourceName")

        for _ in range(2):
            ring.remove("node-a")
            assert ring.get_nodes() == ["node-b"]
            assert ring.point_count == C.DEFAULT_WEIGHT

    def test_remove_absent_is_noop(self, ring):
        ring.add("a", points=[1, 2, 3])
        ring.remove("zzz")

        assert ring.get_nodes() == ["a"]
        assert ring.get_points("a") == [1, 2, 3]

    def test_removal_only_moves_removed_nodes_keys(self, ring):
        """Keys owned by surviving nodes keep their owner."""
        for i in range(10):
            ring.add(f"node-{i}")
        keys = [f"item-{i}" for i in range(3000)]
        before = {key: ring.get(key) for key in keys}

        ring.remove("node-3")

        for key in keys:
            if before[key] != "node-3":
                assert ring.get(key) == before[key]
            else:
                assert ring.get(key) != "node-3"

    def test_freed_points_can_be_reused(self):
        ring = ConsistentHash(range=10, seed=5)
        ring.add("a", 10)
        ring.remove("a")
        ring.add("b", 10)
        assert sorted(ring.get_points("b")) == list(range(10))

    def test_shared_point_survives_other_removal(self, ring):
        """A caller-duplicated point still resolves after the map rebuild."""
        ring.add("a", points=[50])
        ring.add("b", points=[50])
        ring.remove("b")
        assert ring.get("anything") == "a"

    def test_shared_point_not_reused_after_removal(self):
        """Random placement right after a remove avoids points still owned."""
        ring = ConsistentHash(range=2, seed=6)
        ring.add("a", points=[0])
        ring.add("b", points=[0])
        ring.remove("b")
        ring.add("c", 1)

        assert ring.get_points("c") == [1]
        assert ring.get_points("a") == [0]


class TestQueries:
    """Tests for node and point queries."""

    def test_get_nodes_keeps_duplicates(self, ring):
        ring.add("a")
        ring.add("b")
        ring.add("a")
        assert ring.get_nodes() == ["a", "b", "a"]

    def test_get_points_absent(self, ring):
        assert ring.get_points("nonesuch") is None

    def test_contains_and_len(self, ring):
        ring.add("a").add("a").add("b")
        assert "a" in ring
        assert "c" not in ring
        assert len(ring) == 3
        assert list(ring) == ["a", "a", "b"]

    def test_stats(self, ring):
        ring.add("a", 3).add("b", 5).add("a", 2)
        stats = ring.get_stats()

        assert stats["nodes"] == 3
        assert stats["distinct_nodes"] == 2
        assert stats["control_points"] == 10
        assert stats["range"] == C.DEFAULT_RANGE
        assert stats["distribution"] == "random"

    def test_repr(self, ring):
        ring.add("a", 2)
        assert repr(ring) == "ConsistentHash(nodes=1, points=2, distribution='random')"


class TestExhaustion:
    """Tests for random placement failure."""

    def test_too_many_points_raises(self):
        ring = ConsistentHash(range=10)
        with pytest.raises(PlacementError, match="unable to .* control point"):
            ring.add("n", 11)

    def test_failed_add_leaves_ring_unchanged(self):
        ring = ConsistentHash(range=10, seed=1)
        ring.add("a", points=[0, 1, 2])
        before = ring.get("key")

        with pytest.raises(PlacementError):
            ring.add("b", 8)

        assert ring.get_nodes() == ["a"]
        assert ring.point_count == 3
        assert ring.get("key") == before

    def test_error_carries_context(self):
        ring = ConsistentHash(range=3)
        with pytest.raises(PlacementError) as excinfo:
            ring.add("n", 4)

        error = excinfo.value
        assert error.context["ring_range"] == 3
        assert error.context["requested"] == 4
        assert error.to_dict()["code"] == "PLACEMENT_POINT_EXHAUSTION"


class TestConstruction:
    """Tests for construction options."""

    def test_defaults(self):
        ring = ConsistentHash()
        assert ring.config.ring_range == C.DEFAULT_RANGE
        assert ring.config.weight == C.DEFAULT_WEIGHT

    def test_options_override_config(self):
        ring = ConsistentHash(RingConfig(weight=3), range=500, controlPoints=9)
        assert ring.config.ring_range == 500
        assert ring.config.weight == 9

    def test_invalid_option_raises(self):
        with pytest.raises(ConfigurationError):
            ConsistentHash(range=0)

    def test_unknown_option_raises(self):
        with pytest.raises(ConfigurationError, match="Unknown ring option"):
            ConsistentHash(replicas=3)


class TestLoadBalance:
    """Statistical distribution checks."""

    def test_evenly_spaced_nodes_share_keys(self, ring):
        """No bin gets 10x another for 10,000 structured keys."""
        ring_range = ring.config.ring_range
        nbins = 10
        for i in range(nbins):
            ring.add(str(i), 1, [i * ring_range // nbins])

        bins = {str(i): 0 for i in range(nbins)}
        for i in range(10000):
            bins[ring.get(f"a{i}")] += 1

        counts = list(bins.values())
        for a in counts:
            for b in counts:
                assert a * 10 > b
