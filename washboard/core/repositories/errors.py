from __future__ import annotations


class StorageError(Exception):
    """The storage engine failed (I/O, corruption, locking). Not recoverable by the caller."""


class SlotConflictError(Exception):
    """The storage engine rejected an insert because the (date, time slot) pair is taken."""


class SlotNotFoundError(Exception):
    """No reservation exists for the requested (date, time slot) pair."""
