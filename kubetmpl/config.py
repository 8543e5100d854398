"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from kubetmpl.models.config import KubeTmplConfig, LogConfig, LookupConfig
from kubetmpl.models.lookup import ClusterScopedObjectIdentifier


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"KUBETMPL_{key}", default)


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_kind(value: str) -> str:
    if not value or not value[0].isupper():
        raise ValueError(f"Invalid sensitive kind: {value!r}. Must be a capitalised Kubernetes kind")
    return value


def parse_allowlist(value: str) -> list[ClusterScopedObjectIdentifier]:
    """Parse a comma-separated list of ``group/kind/name`` entries."""
    return [ClusterScopedObjectIdentifier.parse(item) for item in value.split(",") if item.strip()]


def load_config() -> KubeTmplConfig:
    """Load configuration from KUBETMPL_* environment variables."""
    return KubeTmplConfig(
        lookup=LookupConfig(
            lookup_namespace=_env("LOOKUP_NAMESPACE", "").strip(),
            cluster_scoped_allowlist=parse_allowlist(_env("CLUSTER_SCOPED_ALLOWLIST", "")),
            sensitive_kind=_validate_kind(_env("SENSITIVE_KIND", "Secret")),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
