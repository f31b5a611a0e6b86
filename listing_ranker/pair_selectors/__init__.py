"""
Pair selector implementations.

Provides implementations of the PairSelector interface for choosing which
pair of items a user should compare next.

Available implementations:
- AdaptiveInsertionSelector: Binary insertion with inference, then greedy information gain
"""

from .adaptive_selector import AdaptiveInsertionSelector, most_informative_pair

__all__ = ["AdaptiveInsertionSelector", "most_informative_pair"]
