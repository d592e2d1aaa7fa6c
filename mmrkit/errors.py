"""Errors raised by mmrkit stores."""

from __future__ import annotations


class MMRError(Exception):
    """Base class for mmrkit errors."""
    pass


class StoreError(MMRError):
    """Backing store operation error."""
    pass


class MissingHashError(StoreError, LookupError):
    """No hash has been written at the requested position."""

    def __init__(self, pos: int):
        super().__init__(f"Missing hash at index {pos}")
        self.pos = pos


class StoreWriteError(StoreError):
    """The storage medium failed to persist an append."""
    pass


class StoreCorruptedError(StoreError):
    """Persisted store contents could not be loaded consistently."""
    pass
