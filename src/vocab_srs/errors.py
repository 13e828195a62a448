"""Exceptions raised by the scheduling core."""


class SRSError(Exception):
    """Base class for scheduling core errors."""


class ItemNotFound(SRSError):
    """A card id is missing from the review session or the item store."""

    def __init__(self, item_id: str, where: str = "item store"):
        self.item_id = item_id
        self.where = where
        super().__init__(f"Vocabulary item {item_id!r} not found in {where}")


class InvalidRating(SRSError, ValueError):
    """A rating outside the 0-5 scale."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Rating must be an integer from 0 to 5, got {value!r}")


class PersistenceWriteFailure(SRSError):
    """A write to a persistence tier failed.

    Only the local tier raises this; remote tier failures are logged.
    The in-memory session passed to the failed call is still usable.
    """

    def __init__(self, tier: str, reason: str = ""):
        self.tier = tier
        self.reason = reason
        message = f"Failed to write to {tier} storage"
        if reason:
            message += f": {reason}"
        super().__init__(message)
