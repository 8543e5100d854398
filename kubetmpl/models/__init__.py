"""Core data structures for kubetmpl."""

from kubetmpl.models.config import KubeTmplConfig, LogConfig, LookupConfig
from kubetmpl.models.lookup import (
    ClusterScopedObjectIdentifier,
    GroupVersionKind,
    LookupRequest,
    ObjectIdentity,
    ResolveOptions,
    ResourceTypeDescriptor,
    TemplateResult,
)

__all__ = [
    "ClusterScopedObjectIdentifier",
    "GroupVersionKind",
    "KubeTmplConfig",
    "LogConfig",
    "LookupConfig",
    "LookupRequest",
    "ObjectIdentity",
    "ResolveOptions",
    "ResourceTypeDescriptor",
    "TemplateResult",
]
