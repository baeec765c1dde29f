"""JSON codec for ProgressRecord.

Wire shape (UTF-8 JSON object):

    {"schemaVersion": 1,
     "intervals": [{"start": 0, "end": 20}, ...],
     "totalWatched": 20,
     "timelineDuration": 100,
     "lastPosition": 20}

Untagged objects are read as version 1. On decode the intervals are
re-validated and re-merged and `totalWatched` is recomputed, so a hand-edited
or stale cache never leaks into the engine.
"""
from __future__ import annotations
import json
import math
from typing import Any

from ..domain.coverage import calculate_total_watched, merge_intervals
from ..domain.errors import StoreDecodeError
from ..domain.models import Interval, ProgressRecord
from ..domain.value_types import TouchPolicy

SCHEMA_VERSION = 1


def record_to_dict(record: ProgressRecord) -> dict[str, Any]:
    return {
        "schemaVersion": SCHEMA_VERSION,
        "intervals": [iv.to_dict() for iv in record.intervals],
        "totalWatched": record.total_watched,
        "timelineDuration": record.timeline_duration,
        "lastPosition": record.last_position,
    }


def encode_record(record: ProgressRecord) -> bytes:
    return json.dumps(record_to_dict(record), separators=(",", ":")).encode("utf-8")


def _number(raw: dict[str, Any], field: str) -> float:
    v = raw.get(field)
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        raise ValueError(f"{field} must be a finite number, got {v!r}")
    try:
        finite = math.isfinite(v)
    except OverflowError:
        finite = False
    if not finite:
        raise ValueError(f"{field} must be a finite number, got {v!r}")
    if v < 0:
        raise ValueError(f"{field} must be >= 0, got {v!r}")
    return v


def record_from_dict(raw: Any, *, touch: TouchPolicy = "inclusive") -> ProgressRecord:
    """Build a record from a decoded JSON object; raises ValueError/InvalidInterval on bad shape."""
    if not isinstance(raw, dict):
        raise ValueError(f"expected a JSON object, got {type(raw).__name__}")
    version = raw.get("schemaVersion", 1)
    if version != SCHEMA_VERSION:
        raise ValueError(f"unsupported schemaVersion {version!r}")
    items = raw.get("intervals")
    if not isinstance(items, list):
        raise ValueError("intervals must be a list")
    ivs: list[Interval] = []
    for item in items:
        if not isinstance(item, dict) or "start" not in item or "end" not in item:
            raise ValueError(f"interval must be an object with start/end, got {item!r}")
        ivs.append(Interval.from_dict(item))
    coverage = merge_intervals(ivs, touch=touch)
    return ProgressRecord(
        intervals=coverage,
        total_watched=calculate_total_watched(coverage),
        timeline_duration=_number(raw, "timelineDuration"),
        last_position=_number(raw, "lastPosition"),
    )


def decode_record(key: str, data: bytes, *, touch: TouchPolicy = "inclusive") -> ProgressRecord:
    try:
        raw = json.loads(data.decode("utf-8"))
        return record_from_dict(raw, touch=touch)
    except (ValueError, RecursionError) as e:  # ValueError covers JSONDecodeError, UnicodeDecodeError, InvalidInterval
        raise StoreDecodeError(key, str(e)) from e
