"""Namespace access guard."""

from __future__ import annotations

from kubetmpl.errors import RestrictedNamespaceError


def resolve_namespace(target: str, restriction: str) -> str:
    """Return the namespace a lookup should use.

    An empty *restriction* imposes nothing. With a restriction set, an empty
    *target* defaults to the restricted namespace and any other namespace is
    refused with ``RestrictedNamespaceError``.
    """
    if restriction:
        if not target:
            return restriction
        if target != restriction:
            raise RestrictedNamespaceError(target, restriction)

    return target
