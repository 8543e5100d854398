"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

from kubetmpl.models.lookup import ClusterScopedObjectIdentifier, ObjectIdentity, ResolveOptions


@dataclass
class LookupConfig:
    """Lookup policy applied to every template evaluation."""

    lookup_namespace: str = ""
    cluster_scoped_allowlist: list[ClusterScopedObjectIdentifier] = field(default_factory=list)
    sensitive_kind: str = "Secret"

    def resolve_options(self, watcher: ObjectIdentity | None = None) -> ResolveOptions:
        """Build the immutable per-evaluation options from this policy."""
        return ResolveOptions(
            lookup_namespace=self.lookup_namespace,
            cluster_scoped_allowlist=tuple(self.cluster_scoped_allowlist),
            watcher=watcher,
        )


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class KubeTmplConfig:
    """Top-level kubetmpl configuration."""

    lookup: LookupConfig = field(default_factory=LookupConfig)
    log: LogConfig = field(default_factory=LogConfig)
