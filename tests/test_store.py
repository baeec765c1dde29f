"""Tests for the record codec, KeyedProgressStore and the key/value adapters."""
import json
import os

import pytest

from watchspan.adapters.codec import SCHEMA_VERSION, decode_record, encode_record, record_to_dict
from watchspan.adapters.kv_directory import JsonDirectoryStore
from watchspan.adapters.kv_memory import InMemoryStore
from watchspan.adapters.progress_store import KeyedProgressStore
from watchspan.application.use_cases import update_progress
from watchspan.domain.errors import StoreDecodeError
from watchspan.domain.models import Interval, ProgressRecord
from watchspan.domain.value_types import TimelineId


def _sample() -> ProgressRecord:
    r = ProgressRecord.empty(612.48)
    for iv in (Interval(0, 12.5), Interval(30.125, 61.0), Interval(12.5, 14.75)):
        r = update_progress(r, iv)
    return r


# ── codec ──

def test_encoded_shape():
    payload = json.loads(encode_record(_sample()))
    assert payload == {
        "schemaVersion": SCHEMA_VERSION,
        "intervals": [{"start": 0, "end": 14.75}, {"start": 30.125, "end": 61.0}],
        "totalWatched": 14.75 + 30.875,
        "timelineDuration": 612.48,
        "lastPosition": 14.75,
    }


def test_round_trip_is_exact():
    r = _sample()
    assert decode_record("k", encode_record(r)) == r


def test_decode_recomputes_total_and_remerges():
    raw = {
        "intervals": [{"start": 10, "end": 20}, {"start": 0, "end": 15}],
        "totalWatched": 9999,
        "timelineDuration": 100,
        "lastPosition": 20,
    }
    r = decode_record("k", json.dumps(raw).encode())
    assert r.intervals == (Interval(0, 20),)
    assert r.total_watched == 20


def test_decode_untagged_record_as_version_1():
    raw = b'{"intervals":[],"totalWatched":0,"videoDuration":0,"timelineDuration":30,"lastPosition":0}'
    assert decode_record("k", raw) == ProgressRecord.empty(30)


@pytest.mark.parametrize("data", [
    b"not json",
    b"\xff\xfe",
    b"[]",
    b'{"intervals": "nope", "timelineDuration": 1, "lastPosition": 0}',
    b'{"intervals": [{"start": 5}], "timelineDuration": 1, "lastPosition": 0}',
    b'{"intervals": [{"start": 5, "end": 1}], "timelineDuration": 10, "lastPosition": 0}',
    b'{"intervals": [], "lastPosition": 0}',
    b'{"intervals": [], "timelineDuration": -3, "lastPosition": 0}',
    b'{"schemaVersion": 2, "intervals": [], "timelineDuration": 1, "lastPosition": 0}',
    b'{"intervals": [{"start": 0, "end": 1' + b"0" * 400 + b'}], "timelineDuration": 10, "lastPosition": 0}',
    b'{"intervals": [], "timelineDuration": 1' + b"0" * 400 + b', "lastPosition": 0}',
])
def test_decode_rejects_corrupt_bytes(data):
    with pytest.raises(StoreDecodeError) as exc:
        decode_record("video-progress-x", data)
    assert exc.value.key == "video-progress-x"
    assert exc.value.__cause__ is not None



def test_decode_rejects_deeply_nested_json():
    with pytest.raises(StoreDecodeError) as exc:
        decode_record("video-progress-x", b"[" * 200_000)
    assert isinstance(exc.value.__cause__, RecursionError)


# ── KeyedProgressStore ──

def test_load_missing_returns_fresh_record(store):
    r = store.load(TimelineId("missing-id"), 120)
    assert r == ProgressRecord(intervals=(), total_watched=0, timeline_duration=120, last_position=0)


def test_save_then_load(store, kv):
    r = _sample()
    store.save(TimelineId("ep-1"), r)
    assert kv.get("video-progress-ep-1") == encode_record(r)
    assert store.load(TimelineId("ep-1"), 0) == r


def test_save_overwrites(store):
    store.save(TimelineId("a"), _sample())
    store.save(TimelineId("a"), ProgressRecord.empty(5))
    assert store.load(TimelineId("a"), 0) == ProgressRecord.empty(5)


def test_load_corrupt_raises_and_keeps_bytes(kv):
    kv.set("video-progress-bad", b"{oops")
    store = KeyedProgressStore(kv)
    with pytest.raises(StoreDecodeError):
        store.load(TimelineId("bad"), 60)
    assert kv.get("video-progress-bad") == b"{oops"


def test_custom_namespace():
    kv = InMemoryStore()
    store = KeyedProgressStore(kv, namespace="course")
    store.save(TimelineId("7"), ProgressRecord.empty(1))
    assert kv.keys() == ["course-7"]


def test_strict_store_round_trips_touching_spans():
    kv = InMemoryStore()
    store = KeyedProgressStore(kv, touch="strict")
    r = update_progress(ProgressRecord.empty(30), Interval(0, 10), touch="strict")
    r = update_progress(r, Interval(10, 20), touch="strict")
    store.save(TimelineId("t"), r)
    assert store.load(TimelineId("t"), 0) == r


def test_unknown_touch_policy_rejected():
    with pytest.raises(ValueError):
        KeyedProgressStore(InMemoryStore(), touch="sideways")  # type: ignore[arg-type]


# ── key/value adapters ──

def test_in_memory_store_copies_values():
    kv = InMemoryStore()
    buf = bytearray(b"abc")
    kv.set("k", buf)
    buf[0] = ord("z")
    assert kv.get("k") == b"abc"
    assert kv.get("nope") is None


def test_directory_store_round_trip(tmp_path):
    kv = JsonDirectoryStore(str(tmp_path / "progress"))
    assert kv.get("video-progress-a/b") is None
    kv.set("video-progress-a/b", b"one")
    kv.set("video-progress-a/b", b"two")
    assert kv.get("video-progress-a/b") == b"two"
    files = os.listdir(tmp_path / "progress")
    assert files == ["video-progress-a%2Fb.json"]


def test_directory_store_with_progress_store(tmp_path):
    store = KeyedProgressStore(JsonDirectoryStore(str(tmp_path)))
    r = _sample()
    store.save(TimelineId("lecture-01"), r)
    reopened = KeyedProgressStore(JsonDirectoryStore(str(tmp_path)))
    assert reopened.load(TimelineId("lecture-01"), 0) == r


@pytest.mark.parametrize("duration", [float("inf"), float("nan")])
def test_non_finite_duration_never_reaches_the_store(store, duration):
    with pytest.raises(ValueError):
        store.save(TimelineId("live"), ProgressRecord.empty(0).with_duration(duration))
    assert store.load(TimelineId("live"), 0) == ProgressRecord.empty(0)
