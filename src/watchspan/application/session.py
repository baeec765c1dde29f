"""Caller-side playback policy.

The coverage engine takes any span it is handed; deciding which spans count
as "watched" belongs to the player. `PlaybackSession` is the policy the
reference web player uses, packaged so other callers can reuse it:

- pause: credit [play start, pause position] if it lasted at least `min_span`
- seek forward while playing: credit at most `seek_credit` seconds past the
  play start, so jumping ahead does not count the skipped content
- skip button while playing: credit [play start, current position] first
- ended: credit [play start, end of timeline]

Every credited span goes through `update_progress`; the session keeps the
latest record and, when given a store, saves it after each change.
"""
from __future__ import annotations
import logging

from ..domain.coverage import check_touch
from ..domain.models import Interval, ProgressRecord
from ..domain.value_types import Seconds, TimelineId, TouchPolicy
from ..ports.store import ProgressStore
from .use_cases import UpdateOutcome, apply_span, resume_position

log = logging.getLogger(__name__)

DEFAULT_MIN_SPAN: Seconds = 1.0
DEFAULT_SEEK_CREDIT: Seconds = 5.0


class PlaybackSession:
    def __init__(
        self,
        record: ProgressRecord,
        *,
        timeline_id: TimelineId | None = None,
        store: ProgressStore | None = None,
        min_span: Seconds = DEFAULT_MIN_SPAN,
        seek_credit: Seconds = DEFAULT_SEEK_CREDIT,
        touch: TouchPolicy = "inclusive",
    ) -> None:
        if store is not None and timeline_id is None:
            raise ValueError("timeline_id is required when a store is given")
        if min_span < 0 or seek_credit < 0:
            raise ValueError("min_span and seek_credit must be >= 0")
        check_touch(touch)
        self.record = record
        self.timeline_id = timeline_id
        self.store = store
        self.min_span = min_span
        self.seek_credit = seek_credit
        self.touch = touch
        self.position: Seconds = resume_position(record)
        self.last_outcome: UpdateOutcome | None = None
        self._play_start: Seconds | None = None

    @classmethod
    def open(
        cls,
        store: ProgressStore,
        timeline_id: TimelineId,
        duration: Seconds = 0.0,
        **kwargs,
    ) -> "PlaybackSession":
        """Load the stored record (or a fresh one) and start a session positioned at the resume point."""
        record = store.load(timeline_id, duration)
        if record.last_position > 0:
            log.info("resuming %s at %.3fs", timeline_id, resume_position(record))
        return cls(record, timeline_id=timeline_id, store=store, **kwargs)

    @property
    def playing(self) -> bool:
        return self._play_start is not None

    def _credit(self, start: Seconds, end: Seconds) -> Interval:
        outcome = apply_span(self.record, Interval(start, end), touch=self.touch)
        self.record = outcome.record
        self.last_outcome = outcome
        self._persist()
        if outcome.milestone is not None:
            log.info("%s: %d%% watched", self.timeline_id or "timeline", outcome.milestone)
        return Interval(start, end)

    def _persist(self) -> None:
        if self.store is not None and self.timeline_id is not None:
            self.store.save(self.timeline_id, self.record)

    def metadata_loaded(self, duration: Seconds) -> None:
        self.record = self.record.with_duration(duration)
        self._persist()

    def play(self, position: Seconds) -> None:
        self.position = position
        self._play_start = position

    def pause(self, position: Seconds) -> Interval | None:
        start, self._play_start = self._play_start, None
        self.position = position
        if start is None or position - start < self.min_span:
            return None
        return self._credit(start, position)

    def seek(self, position: Seconds) -> Interval | None:
        start = self._play_start
        self.position = position
        if start is None:
            return None
        self._play_start = position
        if position > start + self.seek_credit:
            return self._credit(start, start + self.seek_credit)
        return None

    def skip(self, position: Seconds, delta: Seconds) -> Interval | None:
        """Jump `delta` seconds from `position`; credits the span played so far first."""
        credited = None
        start = self._play_start
        if start is not None and position > start:
            credited = self._credit(start, position)
        target = max(0.0, position + delta)
        if self.record.timeline_duration > 0:
            target = min(target, self.record.timeline_duration)
        self.position = target
        if start is not None:
            self._play_start = target
        return credited

    def ended(self) -> Interval | None:
        start, self._play_start = self._play_start, None
        end = self.record.timeline_duration or self.position
        self.position = end
        if start is None or end <= start:
            return None
        return self._credit(start, end)
