"""
Simulated voter implementation.

Answers pairwise questions from latent item scores with a noise parameter,
for testing and for dry runs of a ranking session.
"""

import random

from typing_extensions import override

from ..exceptions import InvalidInputError
from ..interfaces import Voter


class SimulatedVoter(Voter):
    """
    Simulated voter for testing purposes.

    Prefers the item with the higher ground truth score after adding noise.
    """

    def __init__(self, ground_truth: dict[str, float], noise: float = 0.0, seed: int | None = None):
        """
        Initialize simulated voter.

        Args:
            ground_truth: Dict mapping item_id to the voter's true liking of it
            noise: Amount of noise to add (0-1, where 1 = full noise)
            seed: Seed for the voter's private random generator
        """
        self.ground_truth = dict(ground_truth)
        self.noise = max(0.0, min(1.0, noise))  # Clamp to [0, 1]
        self._rng = random.Random(seed)

    def _noisy_score(self, item_id: str) -> float:
        score = self.ground_truth.get(item_id, 0.0)
        if self.noise == 0:
            return score
        # Scale noise by score magnitude
        return score + self._rng.gauss(0, abs(score) * self.noise)

    @override
    def choose(self, user_id: str, item_a: str, item_b: str) -> str:
        if item_a == item_b:
            raise InvalidInputError(f"Cannot choose between {item_a} and itself")
        # Ties go to the first item shown
        if self._noisy_score(item_b) > self._noisy_score(item_a):
            return item_b
        return item_a

    def true_order(self) -> list[str]:
        """Ground truth order, best first, ties broken by item ID."""
        return sorted(self.ground_truth, key=lambda item_id: (-self.ground_truth[item_id], item_id))
