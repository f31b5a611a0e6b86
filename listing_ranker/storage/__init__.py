"""
Storage implementations.

Provides implementations of the Storage interface for persisting comparison
logs, user orders and group membership.

Available implementations:
- InMemoryStorage: Dict-backed storage for tests and single-process use
- JSONLStorage: Append-only JSONL logs and JSON documents with write-ahead commits
"""

from .jsonl_storage import JSONLStorage
from .memory_storage import InMemoryStorage

__all__ = ["InMemoryStorage", "JSONLStorage"]
