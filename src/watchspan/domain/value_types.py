from __future__ import annotations
from typing import NewType, Literal

TimelineId  = NewType("TimelineId", str)   # opaque content id
Seconds     = float                        # timeline-native unit, sub-second allowed
TouchPolicy = Literal["inclusive", "strict"]

TOUCH_POLICIES: tuple[TouchPolicy, ...] = ("inclusive", "strict")
