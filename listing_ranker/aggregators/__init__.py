"""
Rank aggregator implementations.

Available implementations:
- SumOfRanksAggregator: Sum of 1-based positions over members with complete orders
"""

from .sum_of_ranks import SumOfRanksAggregator

__all__ = ["SumOfRanksAggregator"]
