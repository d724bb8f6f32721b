"""
In-memory ObjectStoreClient — versioned dict-backed store for local runs and tests.

Writes append a version; reads return the latest; delete drops every version
of the key. `calls` counts every capability call per operation name.
"""

from __future__ import annotations

import threading
from collections import Counter, defaultdict
from typing import Dict, List, Optional

from contentstore.engine.errors import NotFoundError
from contentstore.storage.client import ObjectStoreClient


class MemoryObjectStoreClient(ObjectStoreClient):
    """Dict-backed store. Thread-safe."""

    def __init__(self, objects: Optional[Dict[str, bytes]] = None):
        self._versions: Dict[str, List[bytes]] = defaultdict(list)
        self._lock = threading.Lock()
        self.versioning_enabled = False
        self.calls: Counter = Counter()
        for key, data in (objects or {}).items():
            self._versions[key].append(bytes(data))

    @property
    def total_calls(self) -> int:
        with self._lock:
            return sum(self.calls.values())

    def put(self, key: str, data: bytes) -> None:
        with self._lock:
            self.calls["put"] += 1
            self._versions[key].append(bytes(data))

    def get(self, key: str) -> bytes:
        with self._lock:
            self.calls["get"] += 1
            versions = self._versions.get(key)
            if not versions:
                raise NotFoundError(f"{key} could not be found", key=key, operation="get")
            return versions[-1]

    def delete(self, key: str) -> None:
        with self._lock:
            self.calls["delete"] += 1
            self._versions.pop(key, None)

    def exists(self, key: str) -> bool:
        with self._lock:
            self.calls["exists"] += 1
            return bool(self._versions.get(key))

    def list_by_prefix(self, prefix: str) -> List[str]:
        with self._lock:
            self.calls["list_by_prefix"] += 1
            return sorted(k for k, v in self._versions.items() if v and k.startswith(prefix))

    def enable_versioning(self) -> None:
        with self._lock:
            self.calls["enable_versioning"] += 1
            self.versioning_enabled = True

    def versions(self, key: str) -> List[bytes]:
        """All stored versions of key, oldest first."""
        with self._lock:
            return list(self._versions.get(key, []))

    def __repr__(self) -> str:
        return f"<MemoryObjectStoreClient objects={len(self._versions)}>"
