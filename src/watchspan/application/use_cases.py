from __future__ import annotations
import logging
from dataclasses import dataclass

from ..domain.coverage import (
    calculate_progress_percentage, calculate_total_watched, crossed_milestone, merge_intervals,
)
from ..domain.models import Interval, ProgressRecord
from ..domain.value_types import Seconds, TimelineId, TouchPolicy
from ..ports.store import ProgressStore

log = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class UpdateOutcome:
    record: ProgressRecord
    previous_percentage: int
    percentage: int
    milestone: int | None  # 10, 20, ... when a decile boundary was crossed


def update_progress(
    record: ProgressRecord,
    new_interval: Interval,
    *,
    touch: TouchPolicy = "inclusive",
) -> ProgressRecord:
    """
    Fold one observed span into `record` and return the new record.

    The input record is left as is. Coverage is the union of every span ever
    passed in, so re-watching never double-counts; `last_position` follows the
    end of `new_interval` even when that moves it backwards.
    """
    coverage = merge_intervals((*record.intervals, new_interval), touch=touch)
    return ProgressRecord(
        intervals=coverage,
        total_watched=calculate_total_watched(coverage),
        timeline_duration=record.timeline_duration,
        last_position=new_interval.end,
    )


def resume_position(record: ProgressRecord) -> Seconds:
    """Where playback should restart; never past a known end of the timeline."""
    if record.timeline_duration > 0:
        return min(record.last_position, record.timeline_duration)
    return record.last_position


def apply_span(
    record: ProgressRecord,
    new_interval: Interval,
    *,
    touch: TouchPolicy = "inclusive",
) -> UpdateOutcome:
    before = calculate_progress_percentage(record)
    updated = update_progress(record, new_interval, touch=touch)
    after = calculate_progress_percentage(updated)
    return UpdateOutcome(
        record=updated,
        previous_percentage=before,
        percentage=after,
        milestone=crossed_milestone(before, after),
    )


def record_span(
    *,
    store: ProgressStore,
    timeline_id: TimelineId,
    interval: Interval,
    fallback_duration: Seconds = 0.0,
    touch: TouchPolicy = "inclusive",
) -> UpdateOutcome:
    """
    load -> update -> save for one span. Not safe against a concurrent writer on
    the same timeline: two overlapping calls lose one update (last write wins).
    """
    record = store.load(timeline_id, fallback_duration)
    outcome = apply_span(record, interval, touch=touch)
    store.save(timeline_id, outcome.record)
    log.debug("timeline %s: +[%s, %s] -> %d interval(s), %.3fs watched, %d%%",
              timeline_id, interval.start, interval.end,
              len(outcome.record.intervals), outcome.record.total_watched, outcome.percentage)
    if outcome.milestone is not None:
        log.info("timeline %s reached %d%% watched", timeline_id, outcome.milestone)
    return outcome
