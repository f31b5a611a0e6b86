"""
Tests for voter implementations.

Focus on ground truth + noise behavior.
"""

import pytest

from listing_ranker.exceptions import InvalidInputError
from listing_ranker.voters import ScriptedVoter, SimulatedVoter


class TestSimulatedVoter:
    """Test SimulatedVoter behavior through public interface."""

    def test_zero_noise_follows_ground_truth(self) -> None:
        """With noise=0, the higher-scored item should always win."""
        # Arrange
        voter = SimulatedVoter({"flat_a": 10.0, "flat_b": 5.0, "flat_c": 1.0}, noise=0.0)

        # Act & Assert
        assert voter.choose("alice", "flat_a", "flat_b") == "flat_a"
        assert voter.choose("alice", "flat_c", "flat_b") == "flat_b"
        assert voter.true_order() == ["flat_a", "flat_b", "flat_c"]

    def test_noise_adds_variance(self) -> None:
        """With noise>0, close items should not always produce the same answer."""
        # Arrange
        voter = SimulatedVoter({"flat_a": 5.0, "flat_b": 4.9}, noise=0.5, seed=1)

        # Act
        answers = {voter.choose("alice", "flat_a", "flat_b") for _ in range(50)}

        # Assert
        assert answers == {"flat_a", "flat_b"}, "Should produce both answers with noise"

    def test_seed_makes_answers_reproducible(self) -> None:
        scores = {"a": 3.0, "b": 2.9, "c": 3.1}
        first = SimulatedVoter(scores, noise=0.8, seed=11)
        second = SimulatedVoter(scores, noise=0.8, seed=11)

        pairs = [("a", "b"), ("b", "c"), ("a", "c")] * 5
        assert [first.choose("u", *p) for p in pairs] == [second.choose("u", *p) for p in pairs]

    def test_tie_goes_to_first_item(self) -> None:
        voter = SimulatedVoter({"a": 1.0, "b": 1.0})

        assert voter.choose("alice", "b", "a") == "b"

    def test_noise_is_clamped(self) -> None:
        assert SimulatedVoter({}, noise=5.0).noise == 1.0
        assert SimulatedVoter({}, noise=-1.0).noise == 0.0

    def test_same_item_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            _ = SimulatedVoter({"a": 1.0}).choose("alice", "a", "a")


class TestScriptedVoter:
    """Test ScriptedVoter behavior through public interface."""

    def test_follows_preference_and_records_questions(self) -> None:
        voter = ScriptedVoter(["c", "a", "b"])

        assert voter.choose("alice", "a", "c") == "c"
        assert voter.choose("alice", "a", "b") == "a"
        assert voter.questions == [("a", "c"), ("a", "b")]

    def test_unknown_item_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            _ = ScriptedVoter(["a", "b"]).choose("alice", "a", "z")
