"""Entry point for `python -m kubetmpl`.

Usage:
    python -m kubetmpl lookup v1 ConfigMap settings -n team-a
"""

from __future__ import annotations

from kubetmpl.cli import cli

cli()
