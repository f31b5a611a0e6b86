"""
Comparison recorder.

Appends a "winner beats loser" fact to a user's log and repairs the stored
order in the same transaction, so the log and the order never disagree.
"""

from collections.abc import Sequence

from .exceptions import InvalidInputError, NotInGroupError
from .inference import WinGraph, reconcile_order
from .interfaces import Storage
from .logging_config import get_logger
from .models import Comparison, UserOrder
from .validation import validate_item_id, validate_user_id

logger = get_logger("recorder")


def apply_comparison(ordered_item_ids: Sequence[str], winner_id: str, loser_id: str) -> list[str]:
    """
    Return a new order consistent with ``winner beats loser``.

    - neither present: appended as ``winner, loser`` (the whole order when it was empty)
    - only loser present: winner inserted immediately before the loser
    - only winner present: loser inserted immediately after the winner
    - both present, loser ahead of winner: winner moved to just before the loser

    The repair is local; the newest fact wins over earlier placement.
    """
    order = list(ordered_item_ids)
    winner_at = order.index(winner_id) if winner_id in order else None
    loser_at = order.index(loser_id) if loser_id in order else None

    if winner_at is None and loser_at is None:
        order.extend([winner_id, loser_id])
    elif winner_at is None:
        assert loser_at is not None
        order.insert(loser_at, winner_id)
    elif loser_at is None:
        order.insert(winner_at + 1, loser_id)
    elif winner_at > loser_at:
        _ = order.pop(winner_at)
        order.insert(order.index(loser_id), winner_id)
        logger.debug(f"Repaired inversion: moved {winner_id} ahead of {loser_id}")
    return order


class ComparisonRecorder:
    """Records comparisons and keeps each user's order consistent with them."""

    def __init__(self, storage: Storage):
        self.storage: Storage = storage

    def _group_items(self, user_id: str) -> list[str]:
        group_id = self.storage.load_user_group(user_id)
        if not group_id:
            raise NotInGroupError(f"User {user_id} is not in a group")
        return self.storage.load_group_items(group_id)

    def record(self, user_id: str, winner_id: str, loser_id: str) -> UserOrder:
        """
        Record that the user prefers winner_id over loser_id.

        The log append and the order update commit together or not at all.

        Returns:
            The user's updated order
        """
        _ = validate_user_id(user_id)
        _ = validate_item_id(winner_id)
        _ = validate_item_id(loser_id)
        if winner_id == loser_id:
            raise InvalidInputError(f"An item cannot be compared with itself: {winner_id}")

        group_items = self._group_items(user_id)
        missing = [i for i in (winner_id, loser_id) if i not in group_items]
        if missing:
            raise InvalidInputError(f"Items not in the user's group: {', '.join(missing)}")

        with self.storage.user_transaction(user_id) as tx:
            comparison = Comparison(winner_id=winner_id, loser_id=loser_id)
            tx.append_comparison(comparison)

            current = tx.load_user_order()
            previous = current.ordered_item_ids if current is not None else []
            repaired = apply_comparison(previous, winner_id, loser_id)
            # Local repair can still contradict older transitive facts.
            graph = WinGraph.build(tx.load_comparisons(), group_items)
            order = UserOrder.build(
                user_id,
                reconcile_order(graph, repaired),
                group_item_ids=group_items,
            )
            tx.save_user_order(order)

        logger.info(
            f"Recorded {winner_id} > {loser_id} for user {user_id} ({len(order)}/{order.total_item_count} ranked)"
        )
        return order
