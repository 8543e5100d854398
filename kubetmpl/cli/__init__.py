"""kubetmpl command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubetmpl`` script).
"""

from kubetmpl.cli.main import cli

__all__ = ["cli"]
