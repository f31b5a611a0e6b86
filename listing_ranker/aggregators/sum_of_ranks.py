"""
Sum-of-ranks aggregator.

Combines the complete orders of all group members into one group ranking.
Each member adds an item's 1-based position to its score; lower totals rank
higher. Items nobody has ranked yet sort last with an infinite score.
"""

import math

from typing_extensions import override

from ..interfaces import RankAggregator, Storage
from ..logging_config import get_logger
from ..models import GroupRankingEntry
from ..validation import validate_group_id

# Module-level logger
logger = get_logger("sum_of_ranks")

# Beyond roughly this many members x items, aggregation needs a streaming redesign.
DEFAULT_MAX_GROUP_MEMBERS = 300
DEFAULT_MAX_GROUP_ITEMS = 300


class SumOfRanksAggregator(RankAggregator):
    """
    Sum-of-ranks (Borda-style) group ranking with partial participation.

    Only members whose order is complete contribute. Entries outside the
    group's current item set are skipped before positions are counted.
    """

    def __init__(
        self,
        storage: Storage,
        max_group_members: int = DEFAULT_MAX_GROUP_MEMBERS,
        max_group_items: int = DEFAULT_MAX_GROUP_ITEMS,
    ):
        self.storage = storage
        self.max_group_members = max_group_members
        self.max_group_items = max_group_items

    @override
    def aggregate(self, group_id: str) -> list[GroupRankingEntry]:
        """
        Rank the group's items by summed positions.

        Ties are broken by item ID so repeated calls on unchanged data give
        identical results.
        """
        _ = validate_group_id(group_id)
        items = list(dict.fromkeys(self.storage.load_group_items(group_id)))
        members = self.storage.load_group_members(group_id)

        if len(members) > self.max_group_members or len(items) > self.max_group_items:
            logger.warning(
                f"Aggregating group {group_id} with {len(members)} members x {len(items)} items, above the practical ceiling"
            )

        item_set = set(items)
        scores = dict.fromkeys(items, 0)
        contributors = dict.fromkeys(items, 0)
        complete_orders = 0

        for user_id in members:
            order = self.storage.load_user_order(user_id)
            if order is None or not order.is_complete:
                continue
            complete_orders += 1
            current = [item_id for item_id in order.ordered_item_ids if item_id in item_set]
            for position, item_id in enumerate(current):
                scores[item_id] += position + 1
                contributors[item_id] += 1

        def total_score(item_id: str) -> float:
            return float(scores[item_id]) if contributors[item_id] else math.inf

        ranked = sorted(items, key=lambda item_id: (total_score(item_id), item_id))
        logger.debug(
            f"Aggregated group {group_id}: {complete_orders}/{len(members)} complete orders over {len(items)} items"
        )
        return [
            GroupRankingEntry(
                item_id=item_id,
                rank=rank,
                total_score=total_score(item_id),
                contributing_users=contributors[item_id],
                total_users=len(members),
            )
            for rank, item_id in enumerate(ranked, 1)
        ]
