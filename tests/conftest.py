"""Shared fixtures for watchspan tests."""
from __future__ import annotations

import random

import pytest

from watchspan.adapters.kv_memory import InMemoryStore
from watchspan.adapters.progress_store import KeyedProgressStore
from watchspan.domain.models import Interval


# Fixed seed so property checks are reproducible across runs
SEED = 42


def _random_intervals(rng: random.Random, n: int, horizon: int = 100) -> list[Interval]:
    """Integer-valued spans (as floats) so sums stay exact; includes zero-length spans."""
    out = []
    for _ in range(n):
        start = rng.randint(0, horizon)
        end = min(horizon, start + rng.choice([0, 1, 2, 5, 10, 30]))
        out.append(Interval(float(start), float(end)))
    return out


@pytest.fixture
def rng() -> random.Random:
    return random.Random(SEED)


@pytest.fixture
def random_interval_sets(rng):
    """200 interval lists of varying size, 0..25 spans each."""
    return [_random_intervals(rng, rng.randint(0, 25)) for _ in range(200)]


@pytest.fixture
def kv() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def store(kv) -> KeyedProgressStore:
    return KeyedProgressStore(kv)
