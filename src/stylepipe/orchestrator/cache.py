from __future__ import annotations

import hashlib
import threading
from pathlib import Path
from typing import Iterable


def file_digest(path: Path) -> str | None:
    h = hashlib.sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                h.update(chunk)
    except FileNotFoundError:
        return None
    return h.hexdigest()


class DigestCache:
    """Last seen content digest per file, used to drop no-op change events."""

    def __init__(self, paths: Iterable[Path] = ()):
        self._lock = threading.Lock()
        self._digests: dict[str, str | None] = {}
        for p in paths:
            self._digests[str(p)] = file_digest(p)

    def __len__(self) -> int:
        return len(self._digests)

    def changed(self, path: Path) -> bool:
        """Record the current digest of `path`; True if it differs from the last one."""
        digest = file_digest(path)
        key = str(path)
        with self._lock:
            if key in self._digests and self._digests[key] == digest:
                return False
            self._digests[key] = digest
            return True
