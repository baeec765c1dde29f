# watchspan/domain/errors.py
from __future__ import annotations


class WatchspanError(Exception):
    """Base class for every error raised by watchspan."""


class InvalidInterval(WatchspanError, ValueError):
    """A reported span has start < 0 or end < start.

    Raised instead of clamping or swapping the bounds: a malformed span means
    the event-detection code upstream has a bug.
    """

    def __init__(self, start: float, end: float, reason: str) -> None:
        super().__init__(f"invalid interval [{start}, {end}]: {reason}")
        self.start = start
        self.end = end
        self.reason = reason


class StoreDecodeError(WatchspanError):
    """Stored bytes under `key` could not be decoded into a ProgressRecord."""

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(f"cannot decode progress record at {key!r}: {reason}")
        self.key = key
        self.reason = reason
