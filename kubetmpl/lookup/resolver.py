"""Resource type resolution.

Maps (group, version, kind) to a ``ResourceTypeDescriptor``. Two backends
share one contract; an evaluation picks one when it is created and keeps it:

RegistryTypeResolver -- asks the live registry, which keeps its own
                        discovery data current.
CachedTypeResolver   -- asks the cluster on first use and memoises the
                        answer in the evaluation's call cache.
"""

from __future__ import annotations

from typing import Protocol

from kubetmpl.cache.call_cache import CallCache
from kubetmpl.errors import LookupFailure, UpstreamError
from kubetmpl.lookup.backends import ClusterClient, ResourceRegistry
from kubetmpl.models.lookup import GroupVersionKind, ResourceTypeDescriptor


class ResourceTypeResolver(Protocol):
    async def resolve(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor: ...


class RegistryTypeResolver:
    def __init__(self, registry: ResourceRegistry) -> None:
        self._registry = registry

    async def resolve(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        try:
            return await self._registry.resolve_type(gvk)
        except LookupFailure:
            raise
        except Exception as exc:
            raise UpstreamError("registry resolve_type", exc) from exc


class CachedTypeResolver:
    def __init__(self, cache: CallCache, client: ClusterClient) -> None:
        self._cache = cache
        self._client = client

    async def resolve(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        descriptor = self._cache.descriptor(gvk)
        if descriptor is None:
            # Discovery failures are not memoised.
            descriptor = await self._client.discover(gvk)
            self._cache.store_descriptor(gvk, descriptor)
        return descriptor
