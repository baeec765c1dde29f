# watchspan/ports/store.py
from __future__ import annotations

from typing import Protocol
from ..domain.models import ProgressRecord
from ..domain.value_types import Seconds, TimelineId


class KeyValueStore(Protocol):
    """Port for a flat bytes-by-key persistent store (e.g., a directory, a dict, localStorage)."""

    def get(self, key: str) -> bytes | None:
        """Return the stored bytes for `key`, or None when nothing is stored."""

    def set(self, key: str, value: bytes) -> None:
        """Store `value` under `key`, replacing any previous value."""


class ProgressStore(Protocol):
    """Port for loading and saving one ProgressRecord per timeline."""

    def load(self, timeline_id: TimelineId, fallback_duration: Seconds) -> ProgressRecord:
        """Return the stored record, or an empty one with `fallback_duration` on a miss."""

    def save(self, timeline_id: TimelineId, record: ProgressRecord) -> None:
        """Persist `record`, overwriting whatever was stored for `timeline_id`."""
