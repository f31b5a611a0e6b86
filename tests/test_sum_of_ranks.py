"""
Tests for SumOfRanksAggregator.

Focus on scoring, partial participation and deterministic tie-breaking.
"""

import math

import pytest

from listing_ranker.aggregators.sum_of_ranks import SumOfRanksAggregator
from listing_ranker.exceptions import InvalidInputError
from listing_ranker.models import UserOrder
from listing_ranker.storage.memory_storage import InMemoryStorage


def save_order(storage: InMemoryStorage, user_id: str, ordered: list[str]) -> None:
    group_id = storage.load_user_group(user_id)
    assert group_id is not None
    items = storage.load_group_items(group_id)
    storage.save_user_order(user_id, UserOrder.build(user_id, ordered, group_item_ids=items))


class TestSumOfRanksAggregator:
    """Test SumOfRanksAggregator behavior through public interface."""

    def test_scores_and_tie_break_by_item_id(self) -> None:
        """[A,B,C] and [B,A,C] should score A=3, B=3, C=6 with A ahead of B by ID."""
        # Arrange
        storage = InMemoryStorage()
        storage.save_group("flat-hunt", ["C", "B", "A"], ["alice", "bob"])
        save_order(storage, "alice", ["A", "B", "C"])
        save_order(storage, "bob", ["B", "A", "C"])

        # Act
        rankings = SumOfRanksAggregator(storage).aggregate("flat-hunt")

        # Assert
        assert [(e.item_id, e.rank, e.total_score) for e in rankings] == [
            ("A", 1, 3.0),
            ("B", 2, 3.0),
            ("C", 3, 6.0),
        ]
        assert all(e.contributing_users == 2 and e.total_users == 2 for e in rankings)
        assert rankings[0].is_unanimous
        assert rankings[0].average_position == 1.5

    def test_incomplete_orders_do_not_contribute(self) -> None:
        # Arrange
        storage = InMemoryStorage()
        storage.save_group("flat-hunt", ["A", "B", "C"], ["alice", "bob"])
        save_order(storage, "alice", ["C", "B", "A"])
        save_order(storage, "bob", ["A", "B"])

        # Act
        rankings = SumOfRanksAggregator(storage).aggregate("flat-hunt")

        # Assert
        assert [e.item_id for e in rankings] == ["C", "B", "A"]
        assert all(e.contributing_users == 1 for e in rankings)
        assert not rankings[0].is_unanimous

    def test_unranked_items_sort_last_with_infinite_score(self) -> None:
        """Items added after the members finished should appear last, not vanish."""
        # Arrange
        storage = InMemoryStorage()
        storage.save_group("flat-hunt", ["A", "B"], ["alice"])
        save_order(storage, "alice", ["B", "A"])
        storage.save_group("flat-hunt", ["A", "B", "NEW"], ["alice"])

        # Act
        rankings = SumOfRanksAggregator(storage).aggregate("flat-hunt")

        # Assert
        assert [e.item_id for e in rankings] == ["B", "A", "NEW"]
        assert math.isinf(rankings[-1].total_score)
        assert rankings[-1].is_unranked
        assert math.isinf(rankings[-1].average_position)

    def test_removed_items_do_not_shift_positions(self) -> None:
        """Stale entries are dropped before positions are counted."""
        # Arrange
        storage = InMemoryStorage()
        storage.save_group("flat-hunt", ["A", "B", "GONE"], ["alice"])
        save_order(storage, "alice", ["GONE", "B", "A"])
        storage.save_group("flat-hunt", ["A", "B"], ["alice"])

        # Act
        rankings = SumOfRanksAggregator(storage).aggregate("flat-hunt")

        # Assert
        assert [(e.item_id, e.total_score) for e in rankings] == [("B", 1.0), ("A", 2.0)]

    def test_no_members_ranks_by_item_id(self) -> None:
        storage = InMemoryStorage()
        storage.save_group("flat-hunt", ["b", "a"], [])

        rankings = SumOfRanksAggregator(storage).aggregate("flat-hunt")

        assert [e.item_id for e in rankings] == ["a", "b"]
        assert all(e.is_unranked for e in rankings)

    def test_repeated_aggregation_is_identical(self) -> None:
        # Arrange
        storage = InMemoryStorage()
        storage.save_group("flat-hunt", ["A", "B", "C", "D"], ["alice", "bob"])
        save_order(storage, "alice", ["D", "A", "C", "B"])
        save_order(storage, "bob", ["A", "D", "B", "C"])
        aggregator = SumOfRanksAggregator(storage)

        # Act
        first = aggregator.aggregate("flat-hunt")
        second = aggregator.aggregate("flat-hunt")

        # Assert
        assert first == second

    def test_unknown_group_is_empty(self) -> None:
        assert SumOfRanksAggregator(InMemoryStorage()).aggregate("nobody") == []

    def test_invalid_group_id_raises(self) -> None:
        with pytest.raises(InvalidInputError):
            _ = SumOfRanksAggregator(InMemoryStorage()).aggregate("../groups")
