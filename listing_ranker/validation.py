"""
Identifier validation for engine entry points.

Every public operation validates its identifiers before touching storage.
"""

import re

from .exceptions import InvalidInputError

# Safe as a single path component for directory-backed storage.
_IDENTITY_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.@:-]{0,127}$")


def validate_user_id(user_id: object) -> str:
    """Return user_id unchanged or raise InvalidInputError."""
    if not isinstance(user_id, str) or not _IDENTITY_PATTERN.match(user_id):
        raise InvalidInputError(f"Invalid user ID: {user_id!r}")
    return user_id


def validate_group_id(group_id: object) -> str:
    """Return group_id unchanged or raise InvalidInputError."""
    if not isinstance(group_id, str) or not _IDENTITY_PATTERN.match(group_id):
        raise InvalidInputError(f"Invalid group ID: {group_id!r}")
    return group_id


def validate_item_id(item_id: object) -> str:
    """Item IDs are opaque; they only need to be non-empty strings."""
    if not isinstance(item_id, str) or not item_id.strip():
        raise InvalidInputError(f"Invalid item ID: {item_id!r}")
    return item_id
