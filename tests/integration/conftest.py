"""Shared fixtures for kubetmpl integration tests.

Provides in-memory stand-ins for the cluster API and the live registry so
integration tests can exercise full lookups (guard, type resolution, fetch
path, facade) without touching a real Kubernetes cluster. Both fakes count
every call so tests can assert that cached lookups stay off the network.
"""

from __future__ import annotations

import copy
from collections import Counter
from typing import Any

import pytest

from kubetmpl.errors import MissingResourceTypeError, ResourceNotFoundError
from kubetmpl.lookup.facade import TemplateResolver
from kubetmpl.models.config import LookupConfig
from kubetmpl.models.lookup import GroupVersionKind, ObjectIdentity, ResourceTypeDescriptor

# ---------------------------------------------------------------------------
# Resource types served by the fake cluster
# ---------------------------------------------------------------------------

_DESCRIPTORS = {
    GroupVersionKind("", "v1", "ConfigMap"): ResourceTypeDescriptor("", "v1", "configmaps", True),
    GroupVersionKind("", "v1", "Secret"): ResourceTypeDescriptor("", "v1", "secrets", True),
    GroupVersionKind("", "v1", "Pod"): ResourceTypeDescriptor("", "v1", "pods", True),
    GroupVersionKind("", "v1", "Namespace"): ResourceTypeDescriptor("", "v1", "namespaces", False),
    GroupVersionKind("rbac.authorization.k8s.io", "v1", "ClusterRole"): ResourceTypeDescriptor(
        "rbac.authorization.k8s.io", "v1", "clusterroles", False
    ),
}


# ---------------------------------------------------------------------------
# Object factory helpers
# ---------------------------------------------------------------------------


def make_object(
    kind: str,
    name: str,
    namespace: str = "",
    labels: dict[str, str] | None = None,
    api_version: str = "v1",
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Build a minimal unstructured object."""
    metadata: dict[str, Any] = {"name": name, "labels": labels or {}}
    if namespace:
        metadata["namespace"] = namespace
    obj: dict[str, Any] = {"apiVersion": api_version, "kind": kind, "metadata": metadata}
    if data is not None:
        obj["data"] = data
    return obj


def _matches(selector: str, labels: dict[str, str]) -> bool:
    """Equality-only selector matching; enough for the fixtures below."""
    if not selector:
        return True
    for requirement in selector.split(","):
        key, _, value = requirement.partition("=")
        if labels.get(key) != value:
            return False
    return True


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeClusterClient:
    """In-memory ClusterClient."""

    def __init__(self) -> None:
        self.objects: dict[tuple[str, str, str, str], dict[str, Any]] = {}
        self.calls: Counter[str] = Counter()

    def add(self, group: str, obj: dict[str, Any]) -> None:
        meta = obj["metadata"]
        self.objects[(group, obj["kind"], meta.get("namespace", ""), meta["name"])] = obj

    async def discover(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        self.calls["discover"] += 1
        try:
            return _DESCRIPTORS[gvk]
        except KeyError:
            raise MissingResourceTypeError(gvk.group, gvk.version, gvk.kind) from None

    async def get(self, descriptor: ResourceTypeDescriptor, kind: str, namespace: str, name: str) -> dict[str, Any]:
        self.calls["get"] += 1
        ns = namespace if descriptor.namespaced else ""
        obj = self.objects.get((descriptor.group, kind, ns, name))
        if obj is None:
            raise ResourceNotFoundError(descriptor.group, descriptor.resource, namespace, name)
        return copy.deepcopy(obj)

    async def list(
        self, descriptor: ResourceTypeDescriptor, kind: str, namespace: str, selector: str
    ) -> list[dict[str, Any]]:
        self.calls["list"] += 1
        return [
            copy.deepcopy(obj)
            for (group, obj_kind, obj_ns, _name), obj in sorted(self.objects.items())
            if group == descriptor.group
            and obj_kind == kind
            and (not namespace or not descriptor.namespaced or obj_ns == namespace)
            and _matches(selector, obj["metadata"].get("labels", {}))
        ]


class FakeRegistry:
    """In-memory ResourceRegistry that records watch subscriptions."""

    def __init__(self, cluster: FakeClusterClient) -> None:
        self._cluster = cluster
        self.calls: Counter[str] = Counter()
        self.subscriptions: list[tuple[ObjectIdentity, str, str, str]] = []

    async def resolve_type(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        self.calls["resolve_type"] += 1
        try:
            return _DESCRIPTORS[gvk]
        except KeyError:
            raise MissingResourceTypeError(gvk.group, gvk.version, gvk.kind) from None

    async def get(self, watcher: ObjectIdentity, gvk: GroupVersionKind, namespace: str, name: str) -> dict[str, Any] | None:
        self.calls["get"] += 1
        self.subscriptions.append((watcher, gvk.kind, namespace, name))
        descriptor = _DESCRIPTORS[gvk]
        ns = namespace if descriptor.namespaced else ""
        obj = self._cluster.objects.get((gvk.group, gvk.kind, ns, name))
        return copy.deepcopy(obj) if obj is not None else None

    async def list(
        self, watcher: ObjectIdentity, gvk: GroupVersionKind, namespace: str, selector: str
    ) -> list[dict[str, Any]]:
        self.calls["list"] += 1
        self.subscriptions.append((watcher, gvk.kind, namespace, selector))
        return await self._cluster.list(_DESCRIPTORS[gvk], gvk.kind, namespace, selector)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


def _populate_cluster(cluster: FakeClusterClient) -> None:
    cluster.add("", make_object("ConfigMap", "cm1", "teamA", data={"color": "blue"}))
    cluster.add("", make_object("ConfigMap", "cm2", "teamA", labels={"app": "web"}))
    cluster.add("", make_object("ConfigMap", "cm3", "teamB", labels={"app": "web"}))
    cluster.add("", make_object("Secret", "db-creds", "teamA", labels={"app": "db"}, data={"password": "aHVudGVyMg=="}))
    cluster.add("", make_object("Namespace", "teamA"))
    cluster.add(
        "rbac.authorization.k8s.io",
        make_object("ClusterRole", "admin", api_version="rbac.authorization.k8s.io/v1"),
    )


@pytest.fixture()
def cluster() -> FakeClusterClient:
    """Fake cluster with ConfigMaps, a Secret, a Namespace and a ClusterRole."""
    fake = FakeClusterClient()
    _populate_cluster(fake)
    return fake


@pytest.fixture()
def registry(cluster: FakeClusterClient) -> FakeRegistry:
    return FakeRegistry(cluster)


@pytest.fixture()
def resolver(cluster: FakeClusterClient, registry: FakeRegistry) -> TemplateResolver:
    return TemplateResolver(cluster, registry=registry, config=LookupConfig())


@pytest.fixture()
def watcher() -> ObjectIdentity:
    return ObjectIdentity(
        group="policy.open-cluster-management.io",
        version="v1",
        kind="ConfigurationPolicy",
        namespace="teamA",
        name="my-policy",
    )
