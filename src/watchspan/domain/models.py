from __future__ import annotations
import math
from dataclasses import dataclass, replace
from typing import Any, Mapping
from .errors import InvalidInterval
from .value_types import Seconds

def _is_finite(v: float) -> bool:
    try:
        return math.isfinite(v)
    except OverflowError:  # int too large for a float
        return False

def _check_duration(timeline_duration: Seconds) -> None:
    if isinstance(timeline_duration, bool) or not isinstance(timeline_duration, (int, float)):
        raise ValueError(f"timeline_duration must be a number, got {timeline_duration!r}")
    if not _is_finite(timeline_duration) or timeline_duration < 0:
        raise ValueError(f"timeline_duration must be finite and >= 0, got {timeline_duration}")

@dataclass(slots=True, frozen=True)
class Interval:
    """One contiguous span reported as watched, in seconds."""
    start: Seconds
    end: Seconds

    def __post_init__(self) -> None:
        for v in (self.start, self.end):
            if isinstance(v, bool) or not isinstance(v, (int, float)):
                raise InvalidInterval(self.start, self.end, "bounds must be numbers")
            if not _is_finite(v):
                raise InvalidInterval(self.start, self.end, "bounds must be finite floats")
        if self.start < 0:
            raise InvalidInterval(self.start, self.end, "start is negative")
        if self.end < self.start:
            raise InvalidInterval(self.start, self.end, "end precedes start")

    @property
    def duration(self) -> Seconds: return self.end - self.start

    def to_dict(self) -> dict[str, Seconds]:
        return {"start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "Interval":
        return cls(start=raw["start"], end=raw["end"])

@dataclass(slots=True, frozen=True)
class ProgressRecord:
    """Watch progress for one timeline.

    `total_watched` is a cache of the summed interval durations; the engine
    and the store adapter always recompute it, nothing else should set it.
    `timeline_duration == 0` means the duration is not known yet.
    """
    intervals: tuple[Interval, ...] = ()
    total_watched: Seconds = 0.0
    timeline_duration: Seconds = 0.0
    last_position: Seconds = 0.0

    @classmethod
    def empty(cls, timeline_duration: Seconds = 0.0) -> "ProgressRecord":
        _check_duration(timeline_duration)
        return cls(intervals=(), total_watched=0.0, timeline_duration=timeline_duration, last_position=0.0)

    def with_duration(self, timeline_duration: Seconds) -> "ProgressRecord":
        _check_duration(timeline_duration)
        return replace(self, timeline_duration=timeline_duration)
