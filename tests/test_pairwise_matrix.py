"""
Tests for PairwiseMatrix.

Focus on classification totality and side-effect-free simulation.
"""

import itertools
import random

import pytest

from listing_ranker.exceptions import InvalidInputError
from listing_ranker.inference.pairwise_matrix import Relation, compute_matrix
from listing_ranker.models import Comparison


def beats(winner: str, loser: str) -> Comparison:
    return Comparison(winner_id=winner, loser_id=loser)


class TestPairwiseMatrix:
    """Test PairwiseMatrix behavior through public interface."""

    def test_transitive_pair_is_inferred(self) -> None:
        """A > B and B > C should classify A vs C as inferred."""
        # Arrange
        comparisons = [beats("A", "B"), beats("B", "C")]

        # Act
        matrix = compute_matrix(comparisons, ["A", "B", "C"])

        # Assert
        assert matrix["A", "B"] == Relation.DIRECT
        assert matrix["B", "A"] == Relation.DIRECT, "Direct is symmetric"
        assert matrix["A", "C"] == Relation.INFERRED
        assert matrix["C", "A"] == Relation.INFERRED
        assert matrix.prefers("A", "C")
        assert not matrix.prefers("C", "A")
        assert matrix.is_fully_resolved()

    def test_unrelated_pair_is_unknown(self) -> None:
        """Items with no path between them should be unknown both ways."""
        matrix = compute_matrix([beats("A", "B")], ["A", "B", "C"])

        assert matrix["A", "C"] == Relation.UNKNOWN
        assert matrix["C", "B"] == Relation.UNKNOWN
        assert matrix.count_unknown() == 4
        assert matrix.unknown_pairs() == [("A", "C"), ("B", "C")]

    def test_every_pair_has_exactly_one_classification(self) -> None:
        """Random logs should classify every ordered pair, and direct pairs never as unknown."""
        rng = random.Random(7)
        items = [f"item_{i}" for i in range(8)]
        for _ in range(20):
            # Arrange
            comparisons = [beats(*rng.sample(items, 2)) for _ in range(rng.randint(0, 15))]

            # Act
            matrix = compute_matrix(comparisons, items)

            # Assert
            for a, b in itertools.permutations(items, 2):
                assert matrix[a, b] in (Relation.DIRECT, Relation.INFERRED, Relation.UNKNOWN)
            for c in comparisons:
                assert matrix[c.winner_id, c.loser_id] == Relation.DIRECT
                assert matrix[c.loser_id, c.winner_id] == Relation.DIRECT

    def test_simulate_does_not_mutate_input(self) -> None:
        """Simulating a comparison should leave the original matrix untouched."""
        # Arrange
        matrix = compute_matrix([beats("A", "B")], ["A", "B", "C", "D"])
        before = matrix.to_dict()

        # Act
        simulated = matrix.simulate("C", "A")

        # Assert
        assert matrix.to_dict() == before
        assert simulated["C", "A"] == Relation.DIRECT
        assert simulated["C", "B"] == Relation.INFERRED
        assert matrix["C", "B"] == Relation.UNKNOWN

    def test_resolved_by_matches_simulation(self) -> None:
        """resolved_by should equal the drop in unknown pairs after simulate."""
        # Arrange
        matrix = compute_matrix([beats("A", "B"), beats("C", "D")], ["A", "B", "C", "D", "E"])

        # Act & Assert
        for winner, loser in itertools.permutations(matrix.item_ids, 2):
            expected = matrix.count_unknown() - matrix.simulate(winner, loser).count_unknown()
            assert matrix.resolved_by(winner, loser) == expected, f"Mismatch for {winner} > {loser}"

    def test_simulate_rejects_bad_items(self) -> None:
        matrix = compute_matrix([], ["A", "B"])

        with pytest.raises(InvalidInputError):
            _ = matrix.simulate("A", "A")
        with pytest.raises(InvalidInputError):
            _ = matrix.simulate("A", "Z")

    def test_comparisons_with_removed_items_are_skipped(self) -> None:
        """Comparisons with items outside the item set should not affect the matrix."""
        # Arrange
        comparisons = [beats("A", "GONE"), beats("GONE", "B")]

        # Act
        matrix = compute_matrix(comparisons, ["A", "B"])

        # Assert
        assert matrix["A", "B"] == Relation.UNKNOWN
        assert len(matrix) == 2

    def test_cycle_marks_both_directions_known(self) -> None:
        """Contradictory comparisons should leave the pair known, not unknown."""
        matrix = compute_matrix([beats("A", "B"), beats("B", "A")], ["A", "B"])

        assert matrix.prefers("A", "B")
        assert matrix.prefers("B", "A")
        assert matrix.is_fully_resolved()

    def test_to_dict_labels(self) -> None:
        matrix = compute_matrix([beats("A", "B")], ["A", "B"])

        assert matrix.to_dict() == {
            "A": {"A": "direct", "B": "direct"},
            "B": {"A": "direct", "B": "direct"},
        }
