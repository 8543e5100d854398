"""Per-evaluation call cache.

Memoises lookup results keyed by the full ``ObjectIdentity`` and resource
type descriptors keyed by ``GroupVersionKind``. An empty result list is a
stored "confirmed absent" answer, distinct from a missing entry.

Entries are write-once: a second ``store`` for an identity that is already
cached keeps the first value. Reads hand out deep copies so callers cannot
mutate cached documents.
"""

from __future__ import annotations

import copy
import threading
from typing import Any

from kubetmpl.models.lookup import GroupVersionKind, ObjectIdentity, ResourceTypeDescriptor

Document = dict[str, Any]


class CallCache:
    """Thread-safe memo of lookups made during one template evaluation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._objects: dict[ObjectIdentity, tuple[Document, ...]] = {}
        self._descriptors: dict[GroupVersionKind, ResourceTypeDescriptor] = {}

    def lookup(self, identity: ObjectIdentity) -> tuple[list[Document], bool]:
        """Return (documents, found). ``found`` is False on a cache miss."""
        with self._lock:
            cached = self._objects.get(identity)
        if cached is None:
            return [], False
        return copy.deepcopy(list(cached)), True

    def store(self, identity: ObjectIdentity, documents: list[Document]) -> None:
        frozen = tuple(copy.deepcopy(documents))
        with self._lock:
            self._objects.setdefault(identity, frozen)

    def descriptor(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor | None:
        with self._lock:
            return self._descriptors.get(gvk)

    def store_descriptor(self, gvk: GroupVersionKind, descriptor: ResourceTypeDescriptor) -> None:
        with self._lock:
            self._descriptors.setdefault(gvk, descriptor)

    def __len__(self) -> int:
        with self._lock:
            return len(self._objects)
