from __future__ import annotations
from ..ports.store import KeyValueStore

class InMemoryStore(KeyValueStore):
    """Dict-backed key/value store; nothing survives the process."""
    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self._data: dict[str, bytes] = dict(initial or {})

    def get(self, key: str) -> bytes | None:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = bytes(value)

    def keys(self) -> list[str]:
        return sorted(self._data)
