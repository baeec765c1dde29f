from __future__ import annotations

from dataclasses import dataclass, replace
import os
from typing import Mapping

from .adapters.progress_store import DEFAULT_NAMESPACE
from .application.session import DEFAULT_MIN_SPAN, DEFAULT_SEEK_CREDIT
from .domain.value_types import TOUCH_POLICIES, TouchPolicy


@dataclass(frozen=True)
class Settings:
    store_dir: str = ".watchspan"
    namespace: str = DEFAULT_NAMESPACE
    touch: TouchPolicy = "inclusive"
    min_span: float = DEFAULT_MIN_SPAN
    seek_credit: float = DEFAULT_SEEK_CREDIT

    def override(self, **changes: object) -> "Settings":
        """Copy with every non-None value in `changes` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {raw!r}")
    return value


def parse_touch(raw: str, source: str) -> TouchPolicy:
    """Normalize a touch policy from env or CLI; raises ValueError naming `source`."""
    touch = raw.strip().lower()
    if touch not in TOUCH_POLICIES:
        raise ValueError(f"{source} must be one of {TOUCH_POLICIES}, got {raw!r}")
    return touch  # type: ignore[return-value]


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if env is None else env
    return Settings(
        store_dir=env.get("WATCHSPAN_STORE_DIR", ".watchspan"),
        namespace=env.get("WATCHSPAN_NAMESPACE", DEFAULT_NAMESPACE),
        touch=parse_touch(env.get("WATCHSPAN_TOUCH", "inclusive"), "WATCHSPAN_TOUCH"),
        min_span=_float_env(env, "WATCHSPAN_MIN_SPAN", DEFAULT_MIN_SPAN),
        seek_credit=_float_env(env, "WATCHSPAN_SEEK_CREDIT", DEFAULT_SEEK_CREDIT),
    )
