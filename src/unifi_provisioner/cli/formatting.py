"""Plan, manifest and report output rendering."""

from __future__ import annotations

import copy
from io import StringIO
from typing import TYPE_CHECKING, Any, NamedTuple

import typer
from ruamel.yaml import YAML

from unifi_provisioner.config.parameters import SECRET_KEYS
from unifi_provisioner.engine.types import NodeStatus

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from unifi_provisioner.config.resolver import ResolvedConfig
    from unifi_provisioner.engine.graph import ResourceGraph
    from unifi_provisioner.engine.types import ProvisioningReport

SENSITIVE = "(sensitive value)"


class _StatusStyle(NamedTuple):
    color: str
    symbol: str
    progress_verb: str


_STATUS_STYLES: dict[str, _StatusStyle] = {
    "pending": _StatusStyle("bright_black", " ", "Waiting"),
    "submitted": _StatusStyle("yellow", "~", "Waiting for readiness"),
    "ready": _StatusStyle("green", "+", "Ready"),
    "failed": _StatusStyle("red", "!", "Failed"),
}


def styler(color: bool) -> Callable[..., str]:
    """Return ``typer.style`` when *color* is True, otherwise a passthrough."""
    if color:
        return typer.style
    return lambda text, **_kw: text


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _align_values(items: dict[str, str]) -> list[tuple[str, str]]:
    """Right-pad keys so ``=`` signs align."""
    if not items:
        return []
    max_key = max(len(k) for k in items)
    return [(k.ljust(max_key), v) for k, v in items.items()]


def _format_value(value: Any) -> str:
    if isinstance(value, str):
        return f'"{value}"'
    if value is None:
        return "null"
    return str(value)


# ---------------------------------------------------------------------------
# Plan rendering
# ---------------------------------------------------------------------------


def format_parameters(resolved: ResolvedConfig, *, color: bool = True) -> str:
    """Render resolved parameters with the layer each value came from."""
    style = styler(color)
    shown = {
        k: SENSITIVE if k in SECRET_KEYS else _format_value(v) for k, v in resolved.items()
    }
    lines = [style("Parameters:", bold=True)]
    for key, value in _align_values(shown):
        source = resolved.source(key.strip())
        lines.append(f"  {key} = {value} " + style(f"({source})", fg="bright_black"))
    return "\n".join(lines)


def format_plan(graph: ResourceGraph, *, color: bool = True) -> str:
    """Render the provisioning order, one resource per line."""
    style = styler(color)
    lines = [style("Provisioning order:", bold=True)]
    for i, resource in enumerate(graph.order(), start=1):
        deps = sorted(graph.dependencies(resource.identity))
        line = style(f"  {i}. + {resource.identity}", fg="green")
        if deps:
            line += style(f"  (after {', '.join(deps)})", fg="bright_black")
        lines.append(line)
    return "\n".join(lines)


def _mask(manifest: dict[str, Any]) -> dict[str, Any]:
    masked = copy.deepcopy(manifest)
    if masked.get("kind") == "Secret":
        masked["stringData"] = dict.fromkeys(masked.get("stringData", {}), SENSITIVE)
    elif masked.get("kind") == "Job":
        for container in masked["spec"]["template"]["spec"].get("containers", []):
            for env in container.get("env", []):
                env["value"] = SENSITIVE
    return masked


def format_manifests(graph: ResourceGraph, *, show_secrets: bool = False) -> str:
    """Render every Kubernetes object of the graph as a multi-document YAML stream."""
    docs = [m for r in graph.order() for m in r.manifests()]
    if not show_secrets:
        docs = [_mask(m) for m in docs]

    yaml = YAML(typ="safe", pure=True)
    yaml.default_flow_style = False
    buf = StringIO()
    yaml.dump_all(docs, buf)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


def progress_verb(status: NodeStatus) -> str:
    return _STATUS_STYLES[status.value].progress_verb


def format_report(report: ProvisioningReport, *, color: bool = True) -> str:
    """Render one line per resource with its final status."""
    style = styler(color)
    lines = []
    for r in report.results:
        s = _STATUS_STYLES[r.status.value]
        line = style(f"  {s.symbol} {r.identity}: {r.status.value}", fg=s.color)
        if r.error:
            line += style(f" ({r.error})", fg=s.color)
        elif r.blocked_by:
            line += style(f" (blocked by {', '.join(r.blocked_by)})", fg="bright_black")
        lines.append(line)
    return "\n".join(lines)


def format_report_summary(summary: Mapping[str, int], *, color: bool = True) -> str:
    """Render ``Provisioning complete! Resources: 6 ready, 0 failed, 0 not submitted.``"""
    style = styler(color)
    failed = summary.get("failed", 0) or summary.get("pending", 0)
    header = (
        style("Provisioning failed!", fg="red", bold=True)
        if failed
        else style("Provisioning complete!", fg="green", bold=True)
    )
    return (
        f"{header} Resources: {summary.get('ready', 0)} ready, "
        f"{summary.get('failed', 0)} failed, {summary.get('pending', 0)} not submitted."
    )


def format_outputs(outputs: Mapping[str, str], *, color: bool = True) -> str:
    """Render stack outputs as aligned ``key = "value"`` lines."""
    style = styler(color)
    lines = [style("Outputs:", bold=True)]
    lines.extend(
        f"  {k} = {v}"
        for k, v in _align_values({k: _format_value(v) for k, v in outputs.items()})
    )
    return "\n".join(lines)
