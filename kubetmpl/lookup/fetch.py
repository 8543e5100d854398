"""Tiered fetch engine.

FetchStrategy    -- Shared pipeline: cluster-scope guard, Get/List dispatch,
                    sensitive-kind annotation.
ReactiveFetch    -- Reads through the live registry, which subscribes the
                    watcher to every object it returns.
CacheFirstFetch  -- Probes the evaluation's call cache and falls back to the
                    cluster API on a miss, storing the answer (including a
                    confirmed-absent marker for Get misses).

The strategy for an evaluation is chosen once, when the evaluation is built.
No strategy retries; every failure reaches the caller on first occurrence.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import structlog

from kubetmpl.cache.call_cache import CallCache
from kubetmpl.errors import ClusterScopedLookupRestrictedError, LookupFailure, ResourceNotFoundError, UpstreamError
from kubetmpl.lookup.allowlist import is_allowed
from kubetmpl.lookup.backends import ClusterClient, ResourceRegistry
from kubetmpl.models.lookup import LookupRequest, ObjectIdentity, ResolveOptions, ResourceTypeDescriptor, TemplateResult
from kubetmpl.observability.metrics import lookup_cache_total, lookup_denied_total

_log = structlog.get_logger(component="lookup.fetch")

Document = dict[str, Any]


class FetchStrategy(ABC):
    """Base class for the retrieval paths."""

    path: str = ""

    def __init__(self, options: ResolveOptions, result: TemplateResult, sensitive_kind: str = "Secret") -> None:
        self._options = options
        self._result = result
        self._sensitive_kind = sensitive_kind

    async def fetch(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> Document | list[Document] | None:
        """Return one document (Get) or a list of documents (List).

        A Get answered from a confirmed-absent cache entry returns ``None``;
        a Get that misses on the cluster raises ``ResourceNotFoundError``.
        """
        self._check_cluster_scope(request, descriptor)

        value: Document | list[Document] | None
        if request.is_list:
            value = await self._list(request, descriptor)
            found = len(value) > 0
        else:
            value = await self._get(request, descriptor)
            found = value is not None

        if found and request.gvk.kind == self._sensitive_kind:
            self._result.mark_sensitive()
        return value

    def _check_cluster_scope(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> None:
        if descriptor.namespaced or not self._options.lookup_namespace:
            return
        group, kind, name = descriptor.group, request.gvk.kind, request.name
        if not is_allowed(self._options.cluster_scoped_allowlist, group, kind, name):
            lookup_denied_total.labels(reason="cluster_scoped").inc()
            _log.info("lookup_denied", reason="cluster_scoped", group=group, kind=kind, name=name)
            raise ClusterScopedLookupRestrictedError(group, kind, name)

    @abstractmethod
    async def _get(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> Document | None: ...

    @abstractmethod
    async def _list(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> list[Document]: ...


class ReactiveFetch(FetchStrategy):
    """Path A: direct reads through the live registry.

    The registry owns freshness and change notification, so nothing is
    cached here.
    """

    path = "reactive"

    def __init__(
        self,
        registry: ResourceRegistry,
        watcher: ObjectIdentity,
        options: ResolveOptions,
        result: TemplateResult,
        sensitive_kind: str = "Secret",
    ) -> None:
        super().__init__(options, result, sensitive_kind)
        self._registry = registry
        self._watcher = watcher

    async def _get(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> Document | None:
        try:
            document = await self._registry.get(self._watcher, request.gvk, request.namespace, request.name)
        except LookupFailure:
            raise
        except Exception as exc:
            raise UpstreamError("registry get", exc) from exc

        if document is None:
            raise ResourceNotFoundError(descriptor.group, descriptor.resource, request.namespace, request.name)
        return document

    async def _list(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> list[Document]:
        try:
            return await self._registry.list(self._watcher, request.gvk, request.namespace, request.selector)
        except LookupFailure:
            raise
        except Exception as exc:
            raise UpstreamError("registry list", exc) from exc


class CacheFirstFetch(FetchStrategy):
    """Paths B and C: call cache first, cluster API on a miss."""

    path = "cache_first"

    def __init__(
        self,
        cache: CallCache,
        client: ClusterClient,
        options: ResolveOptions,
        result: TemplateResult,
        sensitive_kind: str = "Secret",
    ) -> None:
        super().__init__(options, result, sensitive_kind)
        self._cache = cache
        self._client = client

    def _probe(self, identity: ObjectIdentity) -> tuple[list[Document], bool]:
        documents, found = self._cache.lookup(identity)
        lookup_cache_total.labels(result="hit" if found else "miss").inc()
        if found:
            _log.debug("lookup_cache_hit", kind=identity.kind, namespace=identity.namespace, name=identity.name, count=len(documents))
        else:
            _log.debug("lookup_cache_miss", kind=identity.kind, namespace=identity.namespace, name=identity.name)
        return documents, found

    async def _get(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> Document | None:
        identity = request.identity()
        documents, found = self._probe(identity)
        if found:
            return documents[0] if documents else None

        try:
            document = await self._client.get(descriptor, request.gvk.kind, request.namespace, request.name)
        except ResourceNotFoundError:
            self._cache.store(identity, [])
            _log.debug("lookup_not_found_cached", kind=identity.kind, namespace=identity.namespace, name=identity.name)
            raise

        self._cache.store(identity, [document])
        return document

    async def _list(self, request: LookupRequest, descriptor: ResourceTypeDescriptor) -> list[Document]:
        identity = request.identity()
        documents, found = self._probe(identity)
        if found:
            return documents

        documents = await self._client.list(descriptor, request.gvk.kind, request.namespace, request.selector)
        self._cache.store(identity, documents)
        return documents
