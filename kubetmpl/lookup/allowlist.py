"""Cluster-scoped object allowlist."""

from __future__ import annotations

from collections.abc import Iterable

from kubetmpl.models.lookup import WILDCARD, ClusterScopedObjectIdentifier


def _field_matches(pattern: str, value: str) -> bool:
    return pattern == WILDCARD or pattern == value


def is_allowed(allowlist: Iterable[ClusterScopedObjectIdentifier], group: str, kind: str, name: str) -> bool:
    """Return True if any allowlist entry matches (group, kind, name).

    An empty allowlist denies everything.
    """
    return any(
        _field_matches(entry.group, group) and _field_matches(entry.kind, kind) and _field_matches(entry.name, name)
        for entry in allowlist
    )
