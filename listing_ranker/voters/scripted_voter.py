"""
Scripted voter implementation.

Answers every question from a fixed preference list, optionally counting
the questions it was asked.
"""

from collections.abc import Sequence

from typing_extensions import override

from ..exceptions import InvalidInputError
from ..interfaces import Voter


class ScriptedVoter(Voter):
    """Deterministic voter that follows a fixed best-to-worst preference list."""

    def __init__(self, preference: Sequence[str]):
        self.preference = list(preference)
        self._position = {item_id: i for i, item_id in enumerate(self.preference)}
        self.questions = list[tuple[str, str]]()

    @override
    def choose(self, user_id: str, item_a: str, item_b: str) -> str:
        for item_id in (item_a, item_b):
            if item_id not in self._position:
                raise InvalidInputError(f"Item {item_id} is not in the scripted preference")
        self.questions.append((item_a, item_b))
        return item_a if self._position[item_a] < self._position[item_b] else item_b
