from __future__ import annotations
import os
from urllib.parse import quote
from ..ports.store import KeyValueStore

class JsonDirectoryStore(KeyValueStore):
    """
    One file per key under `root_dir` (`<quoted key>.json`).
    Writes go to a temp file first and are moved into place with os.replace,
    so a reader never sees a half-written value. Single writer assumed: two
    processes saving the same key race and the last replace wins.
    """
    def __init__(self, root_dir: str) -> None:
        self.root = root_dir
        os.makedirs(self.root, exist_ok=True)

    def _path(self, key: str) -> str:
        return os.path.join(self.root, quote(key, safe="") + ".json")

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        path = self._path(key)
        tmp = path + ".tmp"
        with open(tmp, "wb") as f:
            f.write(value); f.flush(); os.fsync(f.fileno())
        os.replace(tmp, path)
