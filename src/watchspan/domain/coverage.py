"""Interval coverage engine.

Pure functions over `Interval` sequences and `ProgressRecord` values: merging
raw watched spans into a canonical coverage set, and deriving the aggregates
(unique seconds watched, completion percentage, unwatched gaps) from it.
Nothing here performs I/O or mutates its inputs.
"""
from __future__ import annotations
from typing import Iterable
from .models import Interval, ProgressRecord
from .value_types import Seconds, TouchPolicy, TOUCH_POLICIES


def check_touch(touch: str) -> None:
    if touch not in TOUCH_POLICIES:
        raise ValueError(f"unknown touch policy {touch!r}; expected one of {TOUCH_POLICIES}")


def merge_intervals(intervals: Iterable[Interval], *, touch: TouchPolicy = "inclusive") -> tuple[Interval, ...]:
    """Collapse overlapping spans into a sorted, disjoint coverage set.

    touch="inclusive": a span starting exactly where the current one ends is
    merged into it, so zero-length spans act as touch points and can bridge
    two neighbours. The result has a positive gap between consecutive spans.

    touch="strict": only real overlap merges. Zero-length spans are dropped
    up front since they carry no measure and may not bridge; touching spans
    stay separate (gap >= 0 between consecutive spans).
    """
    check_touch(touch)
    ivs = list(intervals)
    if touch == "strict":
        ivs = [iv for iv in ivs if iv.end > iv.start]
    if not ivs:
        return ()
    ivs.sort(key=lambda iv: (iv.start, iv.end))
    out: list[list[Seconds]] = [[ivs[0].start, ivs[0].end]]
    for iv in ivs[1:]:
        ms, me = out[-1]
        joins = iv.start <= me if touch == "inclusive" else iv.start < me
        if joins:
            out[-1][1] = max(me, iv.end)
        else:
            out.append([iv.start, iv.end])
    return tuple(Interval(s, e) for s, e in out)


def calculate_total_watched(coverage: Iterable[Interval]) -> Seconds:
    return sum((iv.end - iv.start for iv in coverage), 0.0)


def calculate_progress_percentage(record: ProgressRecord) -> int:
    """Whole-number completion in [0, 100]; 0 while the duration is unknown."""
    if record.timeline_duration == 0:
        return 0
    # round() is half-to-even; the cap absorbs float drift and spans past a late-known duration
    pct = record.total_watched / record.timeline_duration * 100
    if pct >= 100:  # also catches inf from a tiny duration
        return 100
    return round(pct)


def unwatched_ranges(record: ProgressRecord) -> list[Interval]:
    """Gaps of [0, timeline_duration] not covered by `record.intervals`."""
    end = record.timeline_duration
    if end <= 0:
        return []
    res: list[Interval] = []
    cur: Seconds = 0.0
    for iv in record.intervals:
        if iv.end <= cur: continue
        if iv.start >= end: break
        if iv.start > cur: res.append(Interval(cur, min(end, iv.start)))
        cur = max(cur, iv.end)
        if cur >= end: break
    if cur < end: res.append(Interval(cur, end))
    return res


def coverage_segments(record: ProgressRecord) -> list[tuple[float, float]]:
    """(left %, width %) of every watched span, clipped to the bar."""
    d = record.timeline_duration
    if d <= 0:
        return []
    segs: list[tuple[float, float]] = []
    for iv in record.intervals:
        left = min(100.0, iv.start / d * 100)
        width = min(iv.duration / d * 100, 100.0 - left)
        segs.append((left, max(0.0, width)))
    return segs


def crossed_milestone(old_pct: int, new_pct: int, step: int = 10) -> int | None:
    """Return the milestone (a multiple of `step`) reached going old -> new, if any."""
    if step <= 0:
        raise ValueError("step must be positive")
    if new_pct // step > old_pct // step:
        return (new_pct // step) * step
    return None


def format_timestamp(seconds: Seconds) -> str:
    if seconds < 0:
        raise ValueError(f"seconds must be >= 0, got {seconds}")
    total = int(seconds)
    h, rem = divmod(total, 3600)
    m, s = divmod(rem, 60)
    if h:
        return f"{h}:{m:02d}:{s:02d}"
    return f"{m}:{s:02d}"
