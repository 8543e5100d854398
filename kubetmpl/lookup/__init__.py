"""Template lookup engine.

Submodules:
    namespace  -- Namespace access guard.
    allowlist  -- Cluster-scoped object allowlist.
    parsing    -- apiVersion and label-selector parsing.
    resolver   -- Kind to resource-type resolution.
    backends   -- Registry and cluster client contracts, kubernetes-asyncio adapter.
    fetch      -- Reactive and cache-first retrieval strategies.
    facade     -- TemplateResolver / Evaluation entry points.
"""

from kubetmpl.lookup.facade import Evaluation, TemplateResolver

__all__ = ["Evaluation", "TemplateResolver"]
