"""
Order consistency against a win graph.

An order is consistent when no item is placed after an item it beats,
directly or transitively. Local placement rules (insert next to the item
just compared) usually keep that true; when they do not, the order is
re-sorted with the fewest moves relative to its current arrangement.
"""

import heapq
from collections.abc import Sequence

from ..logging_config import get_logger
from .win_graph import WinGraph

logger = get_logger("order_consistency")


def _dominance(graph: WinGraph, ordered_item_ids: Sequence[str]) -> dict[str, set[str]]:
    """Items of the order that each item transitively beats."""
    in_order = set(ordered_item_ids)
    return {
        item_id: (graph.reachable_from(item_id) & in_order) - {item_id}
        for item_id in ordered_item_ids
    }


def find_violation(graph: WinGraph, ordered_item_ids: Sequence[str]) -> tuple[str, str] | None:
    """
    Return the first (winner, loser) pair placed in the wrong order, if any.

    Pairs on a preference cycle beat each other both ways and are reported
    like any other violation.
    """
    position = {item_id: i for i, item_id in enumerate(ordered_item_ids)}
    for item_id, beaten in _dominance(graph, ordered_item_ids).items():
        for loser in beaten:
            if position[loser] < position[item_id]:
                return item_id, loser
    return None


def reconcile_order(graph: WinGraph, ordered_item_ids: Sequence[str]) -> list[str]:
    """
    Return an order consistent with every fact in graph, staying close to the input.

    Stable topological sort: among items whose winners are all placed, the
    one earliest in the input goes next. A consistent input comes back
    unchanged. If the facts contain a cycle no consistent order exists and
    the input is returned as is.
    """
    order = list(ordered_item_ids)
    if find_violation(graph, order) is None:
        return order

    position = {item_id: i for i, item_id in enumerate(order)}
    beats = _dominance(graph, order)
    pending_winners = {item_id: 0 for item_id in order}
    for losers in beats.values():
        for loser in losers:
            pending_winners[loser] += 1

    ready = [(position[i], i) for i in order if pending_winners[i] == 0]
    heapq.heapify(ready)
    result = list[str]()
    while ready:
        _, item_id = heapq.heappop(ready)
        result.append(item_id)
        for loser in beats[item_id]:
            pending_winners[loser] -= 1
            if pending_winners[loser] == 0:
                heapq.heappush(ready, (position[loser], loser))

    if len(result) != len(order):
        logger.warning("Preference cycle detected, keeping locally repaired order")
        return order

    logger.info(f"Re-sorted order of {len(order)} items to restore consistency")
    return result
