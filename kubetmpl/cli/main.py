"""Click commands for running template lookups from a shell.

``kubetmpl lookup`` performs exactly the lookup a template would, with the
same namespace and cluster-scope policy, and prints the JSON result.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any

import click

from kubetmpl.config import load_config, parse_allowlist
from kubetmpl.errors import LookupFailure
from kubetmpl.lookup.backends import ClusterClient, DynamicClusterClient
from kubetmpl.lookup.facade import TemplateResolver
from kubetmpl.models.config import KubeTmplConfig
from kubetmpl.observability.logging import get_logger, setup_logging


@asynccontextmanager
async def _open_cluster_client() -> AsyncIterator[ClusterClient]:
    """Configure kubernetes-asyncio from in-cluster config or kubeconfig."""
    import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
    from kubernetes_asyncio.client import ApiClient  # type: ignore[import-untyped]

    log = get_logger("cli")
    try:
        k8s_config.load_incluster_config()
        log.debug("k8s client configured from in-cluster service account")
    except k8s_config.ConfigException:
        await k8s_config.load_kube_config()
        log.debug("k8s client configured from kubeconfig")

    async with ApiClient() as api:
        yield await DynamicClusterClient.connect(api)


async def _run_lookup(
    config: KubeTmplConfig,
    api_version: str,
    kind: str,
    namespace: str,
    name: str,
    selector: str | None,
) -> tuple[dict[str, Any] | None, bool]:
    async with _open_cluster_client() as client:
        resolver = TemplateResolver(client, config=config.lookup)
        evaluation = resolver.new_evaluation(config.lookup.resolve_options())
        result = await evaluation.lookup(api_version, kind, namespace, name, selector)
        return result, evaluation.result.has_sensitive_data


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default=None,
    help="Override KUBETMPL_LOG_LEVEL.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Read-only Kubernetes lookups for configuration templates."""
    try:
        config = load_config()
    except ValueError as exc:
        raise click.UsageError(str(exc)) from exc
    if log_level:
        config.log.level = log_level
    setup_logging(config.log.level)
    ctx.obj = config


@cli.command()
@click.argument("api_version")
@click.argument("kind")
@click.argument("name", required=False, default="")
@click.option("-n", "--namespace", default="", help="Namespace to read from.")
@click.option("-l", "--selector", default=None, help="Label selector for list lookups.")
@click.option(
    "--restrict-namespace",
    default=None,
    help="Only allow lookups in this namespace (overrides KUBETMPL_LOOKUP_NAMESPACE).",
)
@click.option(
    "--allow",
    "allow",
    multiple=True,
    help="Allow a cluster-scoped object as group/kind/name; '*' is a wildcard. Repeatable.",
)
@click.pass_obj
def lookup(
    config: KubeTmplConfig,
    api_version: str,
    kind: str,
    name: str,
    namespace: str,
    selector: str | None,
    restrict_namespace: str | None,
    allow: tuple[str, ...],
) -> None:
    """Look up NAME of KIND, or list KIND when NAME is omitted."""
    lookup_config = config.lookup
    if restrict_namespace is not None:
        lookup_config = replace(lookup_config, lookup_namespace=restrict_namespace)
    if allow:
        try:
            entries = parse_allowlist(",".join(allow))
        except ValueError as exc:
            raise click.BadParameter(str(exc), param_hint="--allow") from exc
        lookup_config = replace(lookup_config, cluster_scoped_allowlist=entries)
    config = replace(config, lookup=lookup_config)

    try:
        result, sensitive = asyncio.run(_run_lookup(config, api_version, kind, namespace, name, selector))
    except LookupFailure as exc:
        raise click.ClickException(str(exc)) from exc

    click.echo(json.dumps(result, indent=2, sort_keys=True, default=str))
    if sensitive:
        click.echo(f"warning: result contains {config.lookup.sensitive_kind} data", err=True)
