# watchspan/adapters/progress_store.py
from __future__ import annotations

import logging

from ..domain.models import ProgressRecord
from ..domain.coverage import check_touch
from ..domain.value_types import Seconds, TimelineId, TouchPolicy
from ..ports.store import KeyValueStore, ProgressStore
from .codec import decode_record, encode_record

log = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "video-progress"


class KeyedProgressStore(ProgressStore):
    """
    Stores each ProgressRecord as JSON under "<namespace>-<timeline_id>" in a KeyValueStore.
    A miss yields a fresh record; undecodable bytes raise StoreDecodeError and are left untouched.
    """
    def __init__(
        self,
        kv: KeyValueStore,
        namespace: str = DEFAULT_NAMESPACE,
        touch: TouchPolicy = "inclusive",
    ) -> None:
        check_touch(touch)
        self.kv = kv
        self.namespace = namespace
        self.touch = touch

    def key(self, timeline_id: TimelineId) -> str:
        return f"{self.namespace}-{timeline_id}"

    def load(self, timeline_id: TimelineId, fallback_duration: Seconds) -> ProgressRecord:
        key = self.key(timeline_id)
        data = self.kv.get(key)
        if data is None:
            log.debug("no stored progress at %s; starting empty (duration=%s)", key, fallback_duration)
            return ProgressRecord.empty(fallback_duration)
        return decode_record(key, data, touch=self.touch)

    def save(self, timeline_id: TimelineId, record: ProgressRecord) -> None:
        key = self.key(timeline_id)
        self.kv.set(key, encode_record(record))
        log.debug("saved progress at %s: %d interval(s), %.3fs watched",
                  key, len(record.intervals), record.total_watched)
