"""
Exception classes for the listing ranker.

Centralized location for all custom exceptions to avoid circular imports.
"""


class RankingError(Exception):
    """Base exception for all ranking engine errors."""
    pass


class InvalidInputError(RankingError, ValueError):
    """Raised when a user, group or item identifier is malformed or misused."""
    pass


class NotInGroupError(RankingError):
    """Raised when a user has no group to rank items in."""
    pass


class ValidationError(RankingError):
    """Base exception for validation-related errors."""
    pass


class ConfigurationError(RankingError):
    """Base exception for configuration-related errors."""
    pass


class StorageCorruptionError(RankingError):
    """Raised when a stored document cannot be parsed or validated."""
    pass
