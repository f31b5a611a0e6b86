"""
Adaptive binary insertion.

Places a new item into a user's order by binary search, consulting the win
graph at every probe. Probes whose outcome is already inferable cost no
user comparison; the first genuinely unknown probe is handed back to the
caller as the pair to show.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from ..logging_config import get_logger
from .win_graph import WinGraph

logger = get_logger("insertion_planner")


@dataclass(frozen=True)
class InsertionPlan:
    """Either an insertion index (no comparison needed) or an item to compare against."""

    insert_index: int | None = None
    compare_with: str | None = None

    def __post_init__(self) -> None:
        if (self.insert_index is None) == (self.compare_with is None):
            raise ValueError("InsertionPlan needs exactly one of insert_index or compare_with")

    @property
    def needs_comparison(self) -> bool:
        return self.compare_with is not None


def plan_insertion(
    graph: WinGraph, target_id: str, ordered_item_ids: Sequence[str]
) -> InsertionPlan:
    """
    Find where target_id belongs in ordered_item_ids (best first).

    Args:
        graph: The user's win graph
        target_id: Item being inserted; must not already be in the order
        ordered_item_ids: Current order, best to worst

    Returns:
        InsertionPlan with insert_index when every probe was inferable,
        otherwise compare_with set to the first ambiguous midpoint item
    """
    if not ordered_item_ids:
        return InsertionPlan(insert_index=0)

    low, high = 0, len(ordered_item_ids)
    while low < high:
        mid = (low + high) // 2
        mid_id = ordered_item_ids[mid]

        if graph.can_reach(target_id, mid_id):
            logger.debug(f"{target_id} beats {mid_id} (inferred), searching [{low}, {mid})")
            high = mid
        elif graph.can_reach(mid_id, target_id):
            logger.debug(f"{mid_id} beats {target_id} (inferred), searching [{mid + 1}, {high})")
            low = mid + 1
        else:
            logger.debug(f"Order of {target_id} vs {mid_id} unknown, comparison needed")
            return InsertionPlan(compare_with=mid_id)

    return InsertionPlan(insert_index=low)
