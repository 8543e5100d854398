"""Collaborator contracts for the lookup engine and the kubernetes-asyncio adapter.

ResourceRegistry    -- Live, watch-backed registry used on the reactive path.
                       Looking an object up through it also subscribes the
                       watcher to future changes of that object.
ClusterClient       -- Direct read access to the cluster API.
DynamicClusterClient -- ClusterClient over the kubernetes-asyncio dynamic client.

Adapters translate library exceptions into the ``kubetmpl.errors`` taxonomy
so the fetch engine never sees transport-specific types.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

import aiohttp
import structlog
from kubernetes_asyncio.client.exceptions import ApiException
from kubernetes_asyncio.dynamic import DynamicClient
from kubernetes_asyncio.dynamic.exceptions import ResourceNotFoundError as _NoSuchResourceType
from kubernetes_asyncio.dynamic.exceptions import ResourceNotUniqueError

from kubetmpl.errors import MissingResourceTypeError, ResourceNotFoundError, UpstreamError
from kubetmpl.models.lookup import GroupVersionKind, ObjectIdentity, ResourceTypeDescriptor

_log = structlog.get_logger(component="lookup.backends")

Document = dict[str, Any]


@runtime_checkable
class ResourceRegistry(Protocol):
    async def resolve_type(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        """Raise ``MissingResourceTypeError`` when the kind is not served."""
        ...

    async def get(self, watcher: ObjectIdentity, gvk: GroupVersionKind, namespace: str, name: str) -> Document | None:
        """Return the object or ``None`` when it does not exist."""
        ...

    async def list(self, watcher: ObjectIdentity, gvk: GroupVersionKind, namespace: str, selector: str) -> list[Document]: ...


@runtime_checkable
class ClusterClient(Protocol):
    async def discover(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        """Raise ``MissingResourceTypeError`` when the kind is not served."""
        ...

    async def get(self, descriptor: ResourceTypeDescriptor, kind: str, namespace: str, name: str) -> Document:
        """Raise ``ResourceNotFoundError`` when the object does not exist."""
        ...

    async def list(self, descriptor: ResourceTypeDescriptor, kind: str, namespace: str, selector: str) -> list[Document]: ...


class DynamicClusterClient:
    """ClusterClient backed by ``kubernetes_asyncio.dynamic.DynamicClient``.

    Use ``connect()`` to build one from an open ``ApiClient``.
    """

    def __init__(self, dynamic_client: Any) -> None:
        self._client = dynamic_client
        self._resources: dict[ResourceTypeDescriptor, Any] = {}

    @classmethod
    async def connect(cls, api_client: Any) -> DynamicClusterClient:
        dynamic_client = await DynamicClient(api_client)
        return cls(dynamic_client)

    async def discover(self, gvk: GroupVersionKind) -> ResourceTypeDescriptor:
        try:
            resource = await self._client.resources.get(api_version=gvk.api_version, kind=gvk.kind)
        except _NoSuchResourceType as exc:
            raise MissingResourceTypeError(gvk.group, gvk.version, gvk.kind) from exc
        except (ApiException, aiohttp.ClientError, ResourceNotUniqueError) as exc:
            raise UpstreamError("discovery", exc) from exc

        descriptor = ResourceTypeDescriptor(
            group=gvk.group,
            version=gvk.version,
            resource=resource.name,
            namespaced=bool(resource.namespaced),
        )
        self._resources[descriptor] = resource
        _log.debug("resource_type_discovered", kind=gvk.kind, resource=descriptor.resource, namespaced=descriptor.namespaced)
        return descriptor

    async def _resource(self, descriptor: ResourceTypeDescriptor, kind: str) -> Any:
        resource = self._resources.get(descriptor)
        if resource is None:
            await self.discover(GroupVersionKind(descriptor.group, descriptor.version, kind))
            resource = self._resources[descriptor]
        return resource

    async def get(self, descriptor: ResourceTypeDescriptor, kind: str, namespace: str, name: str) -> Document:
        resource = await self._resource(descriptor, kind)
        try:
            result = await self._client.get(resource, name=name, namespace=_scoped_namespace(descriptor, namespace))
        except ApiException as exc:
            if exc.status == 404:
                raise ResourceNotFoundError(descriptor.group, descriptor.resource, namespace, name) from exc
            raise UpstreamError("get", exc) from exc
        except aiohttp.ClientError as exc:
            raise UpstreamError("get", exc) from exc
        return result.to_dict()

    async def list(self, descriptor: ResourceTypeDescriptor, kind: str, namespace: str, selector: str) -> list[Document]:
        resource = await self._resource(descriptor, kind)
        kwargs: dict[str, Any] = {"namespace": _scoped_namespace(descriptor, namespace)}
        if selector:
            kwargs["label_selector"] = selector
        try:
            result = await self._client.get(resource, **kwargs)
        except (ApiException, aiohttp.ClientError) as exc:
            raise UpstreamError("list", exc) from exc

        api_version = GroupVersionKind(descriptor.group, descriptor.version, kind).api_version
        items: list[Document] = result.to_dict().get("items") or []
        # List responses omit apiVersion/kind on their items.
        for item in items:
            item.setdefault("apiVersion", api_version)
            item.setdefault("kind", kind)
        return items


def _scoped_namespace(descriptor: ResourceTypeDescriptor, namespace: str) -> str | None:
    if descriptor.namespaced and namespace:
        return namespace
    return None
