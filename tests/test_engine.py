"""
Tests for the RankingEngine facade.
"""

import pytest

from listing_ranker.engine import EngineConfig, RankingEngine
from listing_ranker.exceptions import ConfigurationError, InvalidInputError, NotInGroupError
from listing_ranker.inference import Relation
from listing_ranker.storage.memory_storage import InMemoryStorage


def make_engine(items: list[str], members: list[str] | None = None) -> tuple[InMemoryStorage, RankingEngine]:
    storage = InMemoryStorage()
    storage.save_group("flat-hunt", items, members or ["alice", "bob"])
    return storage, RankingEngine(storage)


class TestEngineConfig:
    def test_defaults(self) -> None:
        config = EngineConfig()

        assert config.max_group_items == 300
        assert config.max_group_members == 300

    def test_rejects_bad_values(self) -> None:
        with pytest.raises(ConfigurationError):
            _ = EngineConfig(max_group_items=1)
        with pytest.raises(ConfigurationError):
            _ = EngineConfig(max_group_members=0)


class TestRankingEngine:
    """Test RankingEngine behavior through public interface."""

    def test_record_then_query_relations(self) -> None:
        """A > B and B > C should show A vs C as inferred."""
        # Arrange
        _, engine = make_engine(["A", "B", "C"])

        # Act
        _ = engine.record_comparison("alice", "A", "B")
        _ = engine.record_comparison("alice", "B", "C")
        matrix = engine.pairwise_relations("alice")

        # Assert
        assert matrix["A", "C"] == Relation.INFERRED
        assert matrix["A", "B"] == Relation.DIRECT
        order = engine.current_order("alice")
        assert order is not None
        assert order.ordered_item_ids == ["A", "B", "C"]
        assert engine.next_pair("alice") is None

    def test_group_rankings_from_members(self) -> None:
        # Arrange
        _, engine = make_engine(["A", "B"])
        _ = engine.record_comparison("alice", "A", "B")
        _ = engine.record_comparison("bob", "A", "B")

        # Act
        rankings = engine.group_rankings("flat-hunt")

        # Assert
        assert [(e.item_id, e.total_score) for e in rankings] == [("A", 2.0), ("B", 4.0)]

    def test_comparison_between_returns_most_recent(self) -> None:
        # Arrange
        _, engine = make_engine(["A", "B", "C"])
        _ = engine.record_comparison("alice", "A", "B")
        _ = engine.record_comparison("alice", "B", "A")

        # Act
        found = engine.comparison_between("alice", "A", "B")

        # Assert
        assert found is not None
        assert found.winner_id == "B"
        assert engine.comparison_between("alice", "A", "C") is None

    def test_estimated_total_comparisons(self) -> None:
        storage, engine = make_engine([f"flat_{i}" for i in range(8)])
        storage.save_group("tiny", ["only"], [])

        assert engine.estimated_total_comparisons("flat-hunt") == 24
        assert engine.estimated_total_comparisons("tiny") == 0

    def test_reset_user_clears_only_that_user(self) -> None:
        # Arrange
        _, engine = make_engine(["A", "B"])
        _ = engine.record_comparison("alice", "A", "B")
        _ = engine.record_comparison("bob", "B", "A")

        # Act
        engine.reset_user("alice")

        # Assert
        assert engine.current_order("alice") is None
        assert engine.comparison_between("alice", "A", "B") is None
        assert engine.current_order("bob") is not None
        assert engine.next_pair("alice") == ("A", "B")

    def test_refresh_after_item_added(self) -> None:
        """Adding an item should mark finished orders incomplete without dropping them."""
        # Arrange
        storage, engine = make_engine(["A", "B"])
        _ = engine.record_comparison("alice", "A", "B")
        storage.save_group("flat-hunt", ["A", "B", "C"], ["alice", "bob"])

        # Act
        updated = engine.refresh_group_orders("flat-hunt")

        # Assert
        assert updated == 1, "bob has no order to refresh"
        order = engine.current_order("alice")
        assert order is not None
        assert order.ordered_item_ids == ["A", "B"]
        assert not order.is_complete
        assert order.total_item_count == 3
        assert engine.refresh_group_orders("flat-hunt") == 0, "Nothing changes on a second refresh"
        assert engine.next_pair("alice") == ("C", "B")

    def test_refresh_after_item_swapped(self) -> None:
        """Removing one item and adding another should leave finished orders incomplete."""
        # Arrange
        storage, engine = make_engine(["A", "B"])
        _ = engine.record_comparison("alice", "A", "B")
        _ = engine.record_comparison("bob", "B", "A")
        storage.save_group("flat-hunt", ["B", "C"], ["alice", "bob"])

        # Act
        updated = engine.refresh_group_orders("flat-hunt")

        # Assert
        assert updated == 2
        for user_id in ("alice", "bob"):
            order = engine.current_order(user_id)
            assert order is not None
            assert set(order.ordered_item_ids) == {"A", "B"}, "Stale entries are kept"
            assert not order.is_complete, "C was never ranked"
            assert order.total_item_count == 2
        rankings = engine.group_rankings("flat-hunt")
        assert all(e.is_unranked for e in rankings), "Incomplete orders must not contribute"

    def test_prune_removed_items(self) -> None:
        # Arrange
        storage, engine = make_engine(["A", "B", "C"])
        _ = engine.record_comparison("alice", "A", "B")
        _ = engine.record_comparison("alice", "B", "C")
        _ = engine.record_comparison("bob", "A", "C")
        storage.save_group("flat-hunt", ["A", "C"], ["alice", "bob"])

        # Act
        touched = engine.prune_items("flat-hunt", ["B"])

        # Assert
        assert touched == 1
        assert [(c.winner_id, c.loser_id) for c in storage.load_comparisons("alice")] == []
        order = engine.current_order("alice")
        assert order is not None
        assert order.ordered_item_ids == ["A", "C"]
        assert order.is_complete
        assert len(storage.load_comparisons("bob")) == 1
        assert engine.pairwise_relations("alice")["A", "C"] == Relation.UNKNOWN

    def test_invalid_identifiers_rejected(self) -> None:
        _, engine = make_engine(["A", "B"])

        with pytest.raises(InvalidInputError):
            _ = engine.current_order("bad/user")
        with pytest.raises(InvalidInputError):
            _ = engine.group_rankings("")
        with pytest.raises(InvalidInputError):
            _ = engine.comparison_between("alice", "A", " ")

    def test_user_outside_any_group(self) -> None:
        _, engine = make_engine(["A", "B"])

        with pytest.raises(NotInGroupError):
            _ = engine.pairwise_relations("carol")
        with pytest.raises(NotInGroupError):
            _ = engine.next_pair("carol")
