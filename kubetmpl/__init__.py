"""kubetmpl: read-only Kubernetes resource lookups for configuration templates."""

__version__ = "0.1.0"
