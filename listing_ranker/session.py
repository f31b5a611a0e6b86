"""
Ranking session runner.

Drives the next-pair / choose / record loop for one user against a Voter
until the engine has nothing left to ask or the comparison budget runs out.
"""

from dataclasses import dataclass, field

from .engine import RankingEngine
from .interfaces import Voter
from .logging_config import get_logger

logger = get_logger("session")


@dataclass
class SessionResult:
    """Outcome of one ranking session."""

    comparisons_made: int
    finished: bool  # True when the engine reported no unknown pairs left
    final_order: list[str]
    pairs_shown: list[tuple[str, str]] = field(default_factory=list)


class RankingSession:
    """Runs comparisons for one user until done or out of budget."""

    def __init__(self, engine: RankingEngine, voter: Voter, budget: int = 1000):
        if budget <= 0:
            raise ValueError(f"budget must be positive, got {budget}")
        self.engine = engine
        self.voter = voter
        self.budget = budget

    def run(self, user_id: str) -> SessionResult:
        pairs_shown = list[tuple[str, str]]()
        finished = False

        while len(pairs_shown) < self.budget:
            pair = self.engine.next_pair(user_id)
            if pair is None:
                finished = True
                break

            item_a, item_b = pair
            winner = self.voter.choose(user_id, item_a, item_b)
            loser = item_b if winner == item_a else item_a
            _ = self.engine.record_comparison(user_id, winner, loser)
            pairs_shown.append(pair)
            logger.debug(f"Session {user_id}: comparison {len(pairs_shown)} {winner} > {loser}")

        order = self.engine.current_order(user_id)
        result = SessionResult(
            comparisons_made=len(pairs_shown),
            finished=finished,
            final_order=list(order.ordered_item_ids) if order is not None else [],
            pairs_shown=pairs_shown,
        )
        logger.info(
            f"Session for {user_id} {'finished' if finished else 'stopped at budget'} after {result.comparisons_made} comparisons"
        )
        return result
