"""Lookup request, cache key and evaluation-state data structures."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

WILDCARD = "*"


@dataclass(frozen=True)
class GroupVersionKind:
    """API group, version and kind of a requested object."""

    group: str
    version: str
    kind: str

    @property
    def api_version(self) -> str:
        """Return the ``apiVersion`` string (``v1`` for the core group)."""
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"


@dataclass(frozen=True)
class ObjectIdentity:
    """Identifies one lookup request and one call-cache slot.

    Two lookups with identical fields share a cache entry, including list
    queries (empty ``name``) and lookups without a selector.
    """

    group: str
    version: str
    kind: str
    namespace: str
    name: str
    selector: str = ""

    @property
    def is_list(self) -> bool:
        return not self.name


@dataclass(frozen=True)
class ResourceTypeDescriptor:
    """Concrete API resource shape for a (group, version, kind) triple."""

    group: str
    version: str
    resource: str  # plural resource name, e.g. "configmaps"
    namespaced: bool


@dataclass(frozen=True)
class ClusterScopedObjectIdentifier:
    """Allowlist entry for a cluster-scoped object.

    Each field is either a literal or the ``*`` wildcard.
    """

    group: str
    kind: str
    name: str

    @classmethod
    def parse(cls, value: str) -> ClusterScopedObjectIdentifier:
        """Parse ``group/kind/name``; the core group is an empty first segment."""
        parts = value.strip().split("/")
        if len(parts) != 3 or not parts[1] or not parts[2]:
            raise ValueError(f"Invalid cluster-scoped allowlist entry: {value!r} (expected group/kind/name)")
        return cls(group=parts[0], kind=parts[1], name=parts[2])


@dataclass(frozen=True)
class ResolveOptions:
    """Per-evaluation lookup policy. Immutable for the evaluation's lifetime.

    ``watcher`` is the object that subscribes to changes of everything it
    looks up; setting it selects the reactive path.
    """

    lookup_namespace: str = ""
    cluster_scoped_allowlist: tuple[ClusterScopedObjectIdentifier, ...] = ()
    watcher: ObjectIdentity | None = None


@dataclass(frozen=True)
class LookupRequest:
    """A validated lookup after namespace and argument resolution."""

    gvk: GroupVersionKind
    namespace: str
    name: str = ""
    selector: str = ""

    @property
    def is_list(self) -> bool:
        return not self.name

    def identity(self) -> ObjectIdentity:
        return ObjectIdentity(
            group=self.gvk.group,
            version=self.gvk.version,
            kind=self.gvk.kind,
            namespace=self.namespace,
            name=self.name,
            selector=self.selector,
        )


@dataclass
class TemplateResult:
    """Accumulated facts about one template evaluation.

    ``has_sensitive_data`` is monotonic: once a sensitive object has been
    read it stays set for the rest of the evaluation.
    """

    _has_sensitive_data: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    @property
    def has_sensitive_data(self) -> bool:
        return self._has_sensitive_data

    def mark_sensitive(self) -> None:
        with self._lock:
            self._has_sensitive_data = True
