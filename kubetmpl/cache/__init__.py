"""Cache layer for kubetmpl.

Submodules:
    call_cache  -- Per-evaluation memo of lookup results and type descriptors.
"""

from kubetmpl.cache.call_cache import CallCache

__all__ = ["CallCache"]
