from __future__ import annotations
from pathlib import Path
from urllib.parse import urlparse

from app.core.config import settings


class LocalObjectStore:
    def __init__(self, base_dir: str | Path):
        self.base = Path(base_dir)
        self.base.mkdir(parents=True, exist_ok=True)

    def put_bytes(self, *, key: str, data: bytes) -> str:
        path = self.resolve_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return key

    def exists(self, key: str) -> bool:
        return self.resolve_path(key).is_file()

    def delete(self, key: str) -> None:
        # An already-missing file is fine; anything else (permissions, I/O) propagates.
        self.resolve_path(key).unlink(missing_ok=True)

    def resolve_path(self, key: str) -> Path:
        """Map a storage key to its file under the media root. Only relative keys are accepted."""
        p = Path(key)
        if not key or p.is_absolute() or ".." in p.parts or urlparse(key).scheme:
            raise ValueError(f"Storage key must stay under the media root: {key}")
        return self.base / p


_store: LocalObjectStore | None = None


def get_object_store() -> LocalObjectStore:
    global _store
    if _store is None:
        _store = LocalObjectStore(settings.media_root)
    return _store
