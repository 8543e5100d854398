"""Lookup error taxonomy.

Every failure a template lookup can surface derives from ``LookupFailure``
and carries the structured context of the refused or failed request.
``ResourceNotFoundError`` is the only member the lookup facade turns into an
empty result; everything else reaches the template engine unchanged.
"""

from __future__ import annotations


class LookupFailure(Exception):
    """Base class for all lookup errors."""


class InvalidLookupArguments(LookupFailure):
    """Raised when apiVersion/kind are missing or malformed."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidSelector(LookupFailure):
    """Raised when a label selector cannot be parsed."""

    def __init__(self, selector: str, detail: str) -> None:
        super().__init__(f"unable to parse label selector {selector!r}: {detail}")
        self.selector = selector
        self.detail = detail


class RestrictedNamespaceError(LookupFailure):
    """Raised when the requested namespace conflicts with the configured restriction."""

    def __init__(self, namespace: str, restriction: str) -> None:
        super().__init__(f"the namespace argument is restricted to {restriction}")
        self.namespace = namespace
        self.restriction = restriction


class MissingResourceTypeError(LookupFailure):
    """Raised when the cluster exposes no API resource for the requested kind."""

    def __init__(self, group: str, version: str, kind: str) -> None:
        api_version = f"{group}/{version}" if group else version
        super().__init__(f"the given kind {kind} with apiVersion {api_version} is not available on the cluster")
        self.group = group
        self.version = version
        self.kind = kind


class ClusterScopedLookupRestrictedError(LookupFailure):
    """Raised when a cluster-scoped object is not on the allowlist."""

    def __init__(self, group: str, kind: str, name: str) -> None:
        super().__init__(f"lookup of cluster-scoped resource '{kind}/{name}' is not allowed")
        self.group = group
        self.kind = kind
        self.name = name


class ResourceNotFoundError(LookupFailure):
    """Raised when a Get finds no object."""

    def __init__(self, group: str, resource: str, namespace: str, name: str) -> None:
        group_resource = f"{resource}.{group}" if group else resource
        super().__init__(f'{group_resource} "{name}" not found')
        self.group = group
        self.resource = resource
        self.namespace = namespace
        self.name = name


class UpstreamError(LookupFailure):
    """Wraps a cluster API or registry failure other than not-found.

    The original exception is chained as ``__cause__`` and kept on ``cause``.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause}")
        self.operation = operation
        self.cause = cause
