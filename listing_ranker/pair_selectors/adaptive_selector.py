"""
Adaptive insertion selector.

Chooses the next pair of items to show a user. Unranked items are placed
first by adaptive binary insertion; items whose position is fully inferable
are inserted without asking. Once every item is placed, the pair whose
answer would resolve the most still-unknown relations is chosen.
"""

from collections.abc import Sequence

from typing_extensions import override

from ..exceptions import NotInGroupError
from ..inference import PairwiseMatrix, WinGraph, compute_matrix, plan_insertion, reconcile_order
from ..interfaces import PairSelector, Storage
from ..logging_config import get_logger
from ..models import UserOrder
from ..validation import validate_user_id

# Module-level logger
logger = get_logger("adaptive_selector")

DEFAULT_MAX_GROUP_ITEMS = 300


def _stored_position(stored: Sequence[str], active: Sequence[str], index: int) -> int:
    """Map an index into the active (current-items-only) order onto the stored order."""
    if index < len(active):
        return stored.index(active[index])
    if not active:
        return len(stored)
    return stored.index(active[-1]) + 1


def most_informative_pair(matrix: PairwiseMatrix) -> tuple[str, str] | None:
    """
    Return the unknown pair whose comparison resolves the most unknown relations.

    The gain of a pair is the better of its two possible outcomes. Ties go to
    the pair met first in item order.
    """
    best_pair: tuple[str, str] | None = None
    best_gain = -1
    for item_a, item_b in matrix.unknown_pairs():
        gain = max(matrix.resolved_by(item_a, item_b), matrix.resolved_by(item_b, item_a))
        if gain > best_gain:
            best_gain = gain
            best_pair = (item_a, item_b)

    if best_pair is not None:
        logger.debug(f"Most informative pair {best_pair} resolves up to {best_gain} relations")
    return best_pair


class AdaptiveInsertionSelector(PairSelector):
    """Binary-insertion-first selector with a greedy information-gain fallback."""

    def __init__(self, storage: Storage, max_group_items: int = DEFAULT_MAX_GROUP_ITEMS):
        """
        Initialize adaptive insertion selector.

        Args:
            storage: Storage to read logs and orders from and write inferred insertions to
            max_group_items: Group size above which a scale warning is logged
        """
        self.storage = storage
        self.max_group_items = max_group_items

    def _group_items(self, user_id: str) -> list[str]:
        group_id = self.storage.load_user_group(user_id)
        if not group_id:
            raise NotInGroupError(f"User {user_id} is not in a group")
        items = self.storage.load_group_items(group_id)
        if len(items) > self.max_group_items:
            logger.warning(
                f"Group {group_id} has {len(items)} items, above the practical ceiling of {self.max_group_items}"
            )
        return items

    @override
    def next_pair(self, user_id: str) -> tuple[str, str] | None:
        """Return the next pair for the user to compare, or None when nothing is unknown."""
        _ = validate_user_id(user_id)
        items = self._group_items(user_id)
        if len(items) < 2:
            logger.debug(f"Fewer than two items for user {user_id}, nothing to compare")
            return None

        with self.storage.user_transaction(user_id) as tx:
            order = tx.load_user_order()
            stored = list(order.ordered_item_ids) if order is not None else []
            item_set = set(items)
            # Entries for items no longer in the group are kept but ignored.
            active = [item_id for item_id in stored if item_id in item_set]

            if not active:
                logger.debug(f"No order yet for user {user_id}, seeding with {items[0]} vs {items[1]}")
                return items[0], items[1]

            comparisons = tx.load_comparisons()
            graph = WinGraph.build(comparisons, items)
            ranked = set(active)
            inserted = 0
            pair: tuple[str, str] | None = None

            for target_id in items:
                if target_id in ranked:
                    continue
                plan = plan_insertion(graph, target_id, active)
                if plan.compare_with is not None:
                    pair = (target_id, plan.compare_with)
                    break

                assert plan.insert_index is not None
                stored.insert(_stored_position(stored, active, plan.insert_index), target_id)
                active.insert(plan.insert_index, target_id)
                ranked.add(target_id)
                inserted += 1
                logger.info(
                    f"Inserted {target_id} at position {plan.insert_index} for user {user_id} without a comparison"
                )

            if inserted:
                stored = reconcile_order(graph, stored)
                tx.save_user_order(UserOrder.build(user_id, stored, group_item_ids=items))

            if pair is None:
                pair = most_informative_pair(compute_matrix(comparisons, items))

        if pair is None:
            logger.info(f"All pairwise relations resolved for user {user_id}")
        else:
            logger.debug(f"Next pair for user {user_id}: {pair[0]} vs {pair[1]}")
        return pair
