"""Lookup facade: the entry point a template engine binds as ``lookup``.

Usage::

    resolver = TemplateResolver(cluster_client, config=config.lookup)
    evaluation = resolver.new_evaluation(config.lookup.resolve_options())
    lookup = evaluation.lookup_helper()

    cm = await lookup("v1", "ConfigMap", "team-a", "settings")
    pods = await lookup("v1", "Pod", "team-a", selector="app=web")

    if evaluation.result.has_sensitive_data:
        ...

An ``Evaluation`` owns the call cache, the ``TemplateResult`` accumulator
and the fetch strategy for exactly one template evaluation. Nothing is
shared between evaluations.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from kubetmpl.cache.call_cache import CallCache
from kubetmpl.errors import InvalidLookupArguments, LookupFailure, ResourceNotFoundError, RestrictedNamespaceError
from kubetmpl.lookup.backends import ClusterClient, ResourceRegistry
from kubetmpl.lookup.fetch import CacheFirstFetch, FetchStrategy, ReactiveFetch
from kubetmpl.lookup.namespace import resolve_namespace
from kubetmpl.lookup.parsing import parse_group_version, parse_selector
from kubetmpl.lookup.resolver import CachedTypeResolver, RegistryTypeResolver, ResourceTypeResolver
from kubetmpl.models.config import LookupConfig
from kubetmpl.models.lookup import GroupVersionKind, LookupRequest, ResolveOptions, TemplateResult
from kubetmpl.observability.metrics import lookup_denied_total, lookups_total

_log = structlog.get_logger(component="lookup.facade")

Document = dict[str, Any]
LookupFunc = Callable[..., Awaitable[Document | None]]


class TemplateResolver:
    """Long-lived owner of the cluster collaborators.

    Args:
        client:   Direct cluster API access, used when no watcher is given.
        registry: Optional live registry for reactive lookups.
        config:   Lookup policy; only ``sensitive_kind`` is read here, the
                  namespace policy arrives per evaluation via ResolveOptions.
    """

    def __init__(
        self,
        client: ClusterClient,
        registry: ResourceRegistry | None = None,
        config: LookupConfig | None = None,
    ) -> None:
        self._client = client
        self._registry = registry
        self._config = config or LookupConfig()

    def new_evaluation(self, options: ResolveOptions | None = None, result: TemplateResult | None = None) -> Evaluation:
        """Create the lookup context for one template evaluation."""
        options = options or ResolveOptions()
        result = result or TemplateResult()
        cache = CallCache()
        sensitive_kind = self._config.sensitive_kind

        type_resolver: ResourceTypeResolver
        strategy: FetchStrategy
        if options.watcher is not None:
            if self._registry is None:
                raise ValueError("a watcher was supplied but this resolver has no resource registry")
            type_resolver = RegistryTypeResolver(self._registry)
            strategy = ReactiveFetch(self._registry, options.watcher, options, result, sensitive_kind)
        else:
            type_resolver = CachedTypeResolver(cache, self._client)
            strategy = CacheFirstFetch(cache, self._client, options, result, sensitive_kind)

        return Evaluation(options, result, cache, type_resolver, strategy)


class Evaluation:
    """Lookup context for a single template evaluation."""

    def __init__(
        self,
        options: ResolveOptions,
        result: TemplateResult,
        cache: CallCache,
        type_resolver: ResourceTypeResolver,
        strategy: FetchStrategy,
    ) -> None:
        self.options = options
        self.result = result
        self.cache = cache
        self._type_resolver = type_resolver
        self._strategy = strategy

    @property
    def path(self) -> str:
        return self._strategy.path

    def lookup_helper(self) -> LookupFunc:
        """Return the plain callable a template engine exposes as ``lookup``."""

        async def _lookup(
            api_version: str,
            kind: str,
            namespace: str = "",
            name: str = "",
            selector: str | None = None,
        ) -> Document | None:
            return await self.lookup(api_version, kind, namespace, name, selector)

        return _lookup

    async def lookup(
        self,
        api_version: str,
        kind: str,
        namespace: str = "",
        name: str = "",
        selector: str | None = None,
    ) -> Document | None:
        """Look up one object (``name`` set) or a list (``name`` empty).

        Returns the object document, ``{"items": [...]}`` for a list, or
        ``None`` when the named object does not exist. All other failures
        raise a ``LookupFailure`` subclass.
        """
        _log.debug("lookup", api_version=api_version, kind=kind, namespace=namespace, name=name, selector=selector)

        try:
            result = await self.get_or_list(api_version, kind, namespace, name, selector)
        except ResourceNotFoundError:
            lookups_total.labels(path=self.path, outcome="not_found").inc()
            _log.debug("lookup_result", kind=kind, namespace=namespace, name=name, found=False)
            return None
        except LookupFailure as exc:
            lookups_total.labels(path=self.path, outcome="error").inc()
            _log.debug("lookup_failed", kind=kind, namespace=namespace, name=name, error=str(exc))
            raise

        lookups_total.labels(path=self.path, outcome=_outcome(result, is_list=not name)).inc()
        _log.debug("lookup_result", kind=kind, namespace=namespace, name=name, found=result is not None)
        return result

    async def get_or_list(
        self,
        api_version: str,
        kind: str,
        namespace: str = "",
        name: str = "",
        selector: str | None = None,
    ) -> Document | None:
        """Like ``lookup`` but raises ``ResourceNotFoundError`` for a missing object."""
        if not api_version or not kind:
            raise InvalidLookupArguments("the apiVersion and kind are required")

        try:
            effective_ns = resolve_namespace(namespace, self.options.lookup_namespace)
        except RestrictedNamespaceError:
            lookup_denied_total.labels(reason="namespace").inc()
            _log.info("lookup_denied", reason="namespace", namespace=namespace, restriction=self.options.lookup_namespace)
            raise

        group, version = parse_group_version(api_version)
        request = LookupRequest(
            gvk=GroupVersionKind(group=group, version=version, kind=kind),
            namespace=effective_ns,
            name=name,
            selector=parse_selector(selector),
        )

        descriptor = await self._type_resolver.resolve(request.gvk)
        value = await self._strategy.fetch(request, descriptor)

        if isinstance(value, list):
            return {"items": value}
        return value


def _outcome(result: Document | None, is_list: bool) -> str:
    if result is None:
        return "not_found"
    if is_list and not result["items"]:
        return "empty"
    return "found"
