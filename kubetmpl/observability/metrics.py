"""Prometheus counters for lookup activity."""

from __future__ import annotations

from prometheus_client import Counter

lookups_total = Counter(
    "kubetmpl_lookups_total",
    "Template lookups by retrieval path and outcome.",
    ["path", "outcome"],
)

lookup_cache_total = Counter(
    "kubetmpl_lookup_cache_total",
    "Per-evaluation call cache probes.",
    ["result"],
)

lookup_denied_total = Counter(
    "kubetmpl_lookup_denied_total",
    "Lookups refused by the namespace or cluster-scope guard.",
    ["reason"],
)
