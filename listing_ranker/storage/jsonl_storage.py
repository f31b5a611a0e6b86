"""
JSONL storage implementation.

Persists each user's comparison log to an append-only JSONL file and their
order to a JSON file. Multi-file commits go through a write-ahead pending
file so an interrupted commit is replayed on the next read instead of
leaving the log and the order out of step.

Layout under the root directory::

    groups/<group_id>.json          {"items": [...], "members": [...]}
    users/<user_id>/group.json      {"group_id": ...}
    users/<user_id>/comparisons.jsonl
    users/<user_id>/order.json
    users/<user_id>/pending.json    only while a commit is being applied
"""

import json
import os
import tempfile
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from typing_extensions import override

from ..exceptions import StorageCorruptionError
from ..interfaces import (
    ComparisonRecord,
    GroupRecord,
    PendingCommitRecord,
    Storage,
    UserGroupRecord,
    UserOrderRecord,
)
from ..logging_config import get_logger
from ..models import Comparison, UserOrder
from ..transaction import StagedWrites
from ..validation import validate_group_id, validate_user_id

# Module-level logger
logger = get_logger("jsonl_storage")

_comparison_adapter = TypeAdapter(ComparisonRecord)
_order_adapter = TypeAdapter(UserOrderRecord)
_group_adapter = TypeAdapter(GroupRecord)
_user_group_adapter = TypeAdapter(UserGroupRecord)
_pending_adapter = TypeAdapter(PendingCommitRecord)


def comparison_to_record(comparison: Comparison) -> ComparisonRecord:
    return {
        "comparison_id": comparison.comparison_id,
        "winner_id": comparison.winner_id,
        "loser_id": comparison.loser_id,
        "compared_at": comparison.compared_at,
    }


def comparison_from_record(record: ComparisonRecord) -> Comparison:
    return Comparison(
        winner_id=record["winner_id"],
        loser_id=record["loser_id"],
        comparison_id=record["comparison_id"],
        compared_at=record["compared_at"],
    )


def order_to_record(order: UserOrder) -> UserOrderRecord:
    return {
        "user_id": order.user_id,
        "ordered_item_ids": list(order.ordered_item_ids),
        "last_updated": order.last_updated,
        "is_complete": order.is_complete,
        "total_item_count": order.total_item_count,
    }


def order_from_record(record: UserOrderRecord) -> UserOrder:
    return UserOrder(
        user_id=record["user_id"],
        ordered_item_ids=list(record["ordered_item_ids"]),
        last_updated=record["last_updated"],
        is_complete=record["is_complete"],
        total_item_count=record["total_item_count"],
    )


def _write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON to a temp file in the same directory, then rename over path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read_json_document(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise StorageCorruptionError(f"Cannot parse {path}: {e}") from e


class JSONLStorage(Storage):
    """
    Directory-backed storage.

    Comparison logs are append-only JSONL; orders, groups and user links are
    small JSON documents replaced atomically by rename.
    """

    root: Path
    groups_dir: Path
    users_dir: Path

    def __init__(self, root: Path | str):
        """
        Initialize JSONL storage.

        Args:
            root: Directory holding the groups/ and users/ trees
        """
        super().__init__()
        self.root = Path(root)
        self.groups_dir = self.root / "groups"
        self.users_dir = self.root / "users"

        # Ensure directories exist
        self.groups_dir.mkdir(parents=True, exist_ok=True)
        self.users_dir.mkdir(parents=True, exist_ok=True)

        logger.info(f"JSONL storage initialized at {self.root}")

    def _user_dir(self, user_id: str) -> Path:
        return self.users_dir / validate_user_id(user_id)

    def _comparisons_path(self, user_id: str) -> Path:
        return self._user_dir(user_id) / "comparisons.jsonl"

    def _order_path(self, user_id: str) -> Path:
        return self._user_dir(user_id) / "order.json"

    def _pending_path(self, user_id: str) -> Path:
        return self._user_dir(user_id) / "pending.json"

    def _group_path(self, group_id: str) -> Path:
        return self.groups_dir / f"{validate_group_id(group_id)}.json"

    # Groups

    def save_group(self, group_id: str, items: Iterable[str], members: Iterable[str]) -> None:
        """Create or replace a group and link its members to it."""
        record: GroupRecord = {"items": list(items), "members": list(members)}
        _write_json_atomic(self._group_path(group_id), record)
        for user_id in record["members"]:
            link: UserGroupRecord = {"group_id": group_id}
            _write_json_atomic(self._user_dir(user_id) / "group.json", link)
        logger.info(
            f"Saved group {group_id}: {len(record['items'])} items, {len(record['members'])} members"
        )

    def _load_group(self, group_id: str) -> GroupRecord | None:
        path = self._group_path(group_id)
        if not path.exists():
            logger.debug(f"No group file for {group_id}")
            return None
        try:
            return _group_adapter.validate_python(_read_json_document(path))
        except PydanticValidationError as e:
            raise StorageCorruptionError(f"Invalid group document {path}: {e}") from e

    @override
    def load_group_items(self, group_id: str) -> list[str]:
        group = self._load_group(group_id)
        return list(group["items"]) if group is not None else []

    @override
    def load_group_members(self, group_id: str) -> list[str]:
        group = self._load_group(group_id)
        return list(group["members"]) if group is not None else []

    @override
    def load_user_group(self, user_id: str) -> str | None:
        path = self._user_dir(user_id) / "group.json"
        if not path.exists():
            return None
        try:
            return _user_group_adapter.validate_python(_read_json_document(path))["group_id"]
        except PydanticValidationError as e:
            raise StorageCorruptionError(f"Invalid group link {path}: {e}") from e

    # Per-user data

    def _read_log(self, user_id: str) -> list[Comparison]:
        path = self._comparisons_path(user_id)
        if not path.exists():
            return []

        comparisons = list[Comparison]()
        with open(path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    record = _comparison_adapter.validate_python(json.loads(line))
                    comparisons.append(comparison_from_record(record))
                except (json.JSONDecodeError, PydanticValidationError) as e:
                    # Skip corrupted or invalid lines
                    logger.warning(f"Skipping invalid JSON line in {path}: {e}")
                    continue
        return comparisons

    def _read_order(self, user_id: str) -> UserOrder | None:
        path = self._order_path(user_id)
        if not path.exists():
            return None
        try:
            return order_from_record(_order_adapter.validate_python(_read_json_document(path)))
        except PydanticValidationError as e:
            raise StorageCorruptionError(f"Invalid order document {path}: {e}") from e

    @override
    def load_comparisons(self, user_id: str) -> list[Comparison]:
        with self._user_locks.lock_for(user_id):
            self._recover(user_id)
            return self._read_log(user_id)

    @override
    def load_user_order(self, user_id: str) -> UserOrder | None:
        with self._user_locks.lock_for(user_id):
            self._recover(user_id)
            return self._read_order(user_id)

    def get_comparison_count(self, user_id: str) -> int:
        """Get number of stored comparisons for a user."""
        return len(self.load_comparisons(user_id))

    # Commit and recovery

    @override
    def _commit(self, user_id: str, staged: StagedWrites) -> None:
        record: PendingCommitRecord = {
            "delete_all": staged.delete_all,
            "replaced_comparisons": (
                [comparison_to_record(c) for c in staged.replaced_comparisons]
                if staged.replaced_comparisons is not None
                else None
            ),
            "appended": [comparison_to_record(c) for c in staged.appended],
            "order": order_to_record(staged.order) if staged.order is not None else None,
            "order_written": staged.order_written,
        }
        pending_path = self._pending_path(user_id)
        _write_json_atomic(pending_path, record)
        self._apply_pending(user_id, record)
        pending_path.unlink()
        logger.debug(f"Applied commit for user {user_id}: {len(record['appended'])} comparisons appended")

    def _recover(self, user_id: str) -> None:
        """Finish a commit that was interrupted after its pending file was written."""
        pending_path = self._pending_path(user_id)
        if not pending_path.exists():
            return
        logger.warning(f"Replaying interrupted commit for user {user_id}")
        try:
            record = _pending_adapter.validate_python(_read_json_document(pending_path))
        except PydanticValidationError as e:
            raise StorageCorruptionError(f"Invalid pending commit {pending_path}: {e}") from e
        self._apply_pending(user_id, record)
        pending_path.unlink()

    def _apply_pending(self, user_id: str, record: PendingCommitRecord) -> None:
        """Apply a pending commit. Safe to run more than once for the same record."""
        comparisons_path = self._comparisons_path(user_id)
        order_path = self._order_path(user_id)
        comparisons_path.parent.mkdir(parents=True, exist_ok=True)

        if record["delete_all"]:
            comparisons_path.unlink(missing_ok=True)
            order_path.unlink(missing_ok=True)

        replaced = record["replaced_comparisons"]
        if replaced is not None:
            fd, tmp_name = tempfile.mkstemp(dir=comparisons_path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                for comparison in replaced:
                    json.dump(comparison, f, ensure_ascii=False)
                    _ = f.write("\n")
            os.replace(tmp_name, comparisons_path)

        already_logged = {c.comparison_id for c in self._read_log(user_id)}
        to_append = [c for c in record["appended"] if c["comparison_id"] not in already_logged]
        if to_append:
            with open(comparisons_path, "a", encoding="utf-8") as f:
                for comparison in to_append:
                    json.dump(comparison, f, ensure_ascii=False)
                    _ = f.write("\n")
                f.flush()
                os.fsync(f.fileno())

        if record["order_written"]:
            order = record["order"]
            if order is None:
                order_path.unlink(missing_ok=True)
            else:
                _write_json_atomic(order_path, order)
