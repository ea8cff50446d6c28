"""CLI command implementations."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer

from unifi_provisioner.cli import app
from unifi_provisioner.cli.errors import handle_error

if TYPE_CHECKING:
    from unifi_provisioner.config.schema import Config
    from unifi_provisioner.engine.graph import ResourceGraph
    from unifi_provisioner.engine.types import ProvisioningReport

ConfigPath = Annotated[
    Path,
    typer.Option("--config", "-c", help="Path to the stack file."),
]

NoColor = Annotated[
    bool,
    typer.Option("--no-color", help="Disable colored output."),
]

AutoApprove = Annotated[
    bool,
    typer.Option("--auto-approve", help="Skip interactive approval."),
]

_DEFAULT_CONFIG = Path("unifi-provisioner.yaml")


def _use_color(no_color: bool) -> bool:
    """Determine whether to use color output."""
    return not (no_color or os.environ.get("NO_COLOR"))


def _load(config: Path, *, color: bool) -> tuple[Config, ResourceGraph]:
    """Load the stack file and build its graph; any error exits with code 1."""
    from unifi_provisioner.config import build_graph, load

    try:
        cfg = load(config)
        return cfg, build_graph(cfg)
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc


def _provision_with_progress(
    cfg: Config, *, total: int, color: bool, parallelism: int | None
) -> ProvisioningReport:
    """Provision with a Rich progress bar and per-resource status lines."""
    from rich.console import Console
    from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

    from unifi_provisioner.cli.formatting import progress_verb
    from unifi_provisioner.config import provision
    from unifi_provisioner.engine.types import NodeStatus
    from unifi_provisioner.resources.base import Resource

    console = Console(no_color=not color)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Provisioning", total=total)

        def on_progress(resource: Resource, status: NodeStatus) -> None:
            if status == NodeStatus.SUBMITTED:
                progress.update(
                    task, description=f"{resource.identity}: {progress_verb(status)}..."
                )
            elif status in (NodeStatus.READY, NodeStatus.FAILED):
                progress.console.print(f"  {resource.identity}: {progress_verb(status)}")
                progress.advance(task)

        return provision(cfg, parallelism=parallelism, progress=on_progress)


@app.command()
def plan(
    config: ConfigPath = _DEFAULT_CONFIG,
    manifests: Annotated[
        bool,
        typer.Option("--manifests", help="Also print the rendered Kubernetes objects."),
    ] = False,
    show_secrets: Annotated[
        bool,
        typer.Option("--show-secrets", help="Do not mask secret values in manifests."),
    ] = False,
    no_color: NoColor = False,
) -> None:
    """Show the resolved parameters and the order resources would be provisioned in."""
    from unifi_provisioner.cli.formatting import (
        format_manifests,
        format_outputs,
        format_parameters,
        format_plan,
    )

    color = _use_color(no_color)
    cfg, graph = _load(config, color=color)

    typer.echo(format_parameters(cfg.resolved, color=color))
    typer.echo()
    typer.echo(format_plan(graph, color=color))
    typer.echo()
    typer.echo(format_outputs(graph.outputs, color=color))

    if manifests:
        typer.echo()
        typer.echo(format_manifests(graph, show_secrets=show_secrets), nl=False)


@app.command(name="apply")
def apply_cmd(
    config: ConfigPath = _DEFAULT_CONFIG,
    auto_approve: AutoApprove = False,
    parallelism: Annotated[
        int | None,
        typer.Option("--parallelism", min=1, help="Resources provisioned concurrently."),
    ] = None,
    no_color: NoColor = False,
) -> None:
    """Provision every resource, waiting for the init job before the workload."""
    from unifi_provisioner.cli.formatting import (
        format_outputs,
        format_plan,
        format_report,
        format_report_summary,
    )

    color = _use_color(no_color)
    cfg, graph = _load(config, color=color)

    typer.echo(format_plan(graph, color=color))
    typer.echo()

    if not auto_approve:
        try:
            typer.confirm("Do you want to provision these resources?", abort=True)
        except typer.Abort as e:
            typer.echo("Apply canceled.", err=True)
            raise typer.Exit(1) from e

    try:
        report = _provision_with_progress(
            cfg, total=len(graph), color=color, parallelism=parallelism
        )
        typer.echo()
        typer.echo(format_report(report, color=color))
        typer.echo()
        typer.echo(format_report_summary(report.summary(), color=color))
        report.raise_for_failures()
    except Exception as exc:
        raise typer.Exit(handle_error(exc, color=color)) from exc

    typer.echo()
    typer.echo(format_outputs(report.outputs, color=color))


@app.command()
def validate(
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Validate the stack file and the resource graph it produces."""
    from unifi_provisioner.cli.formatting import styler

    color = _use_color(no_color)
    _load(config, color=color)

    typer.echo(styler(color)("Configuration is valid.", fg="green"))


@app.command()
def outputs(
    config: ConfigPath = _DEFAULT_CONFIG,
    no_color: NoColor = False,
) -> None:
    """Print the stack outputs (namespace and service names)."""
    from unifi_provisioner.cli.formatting import format_outputs

    color = _use_color(no_color)
    _, graph = _load(config, color=color)

    typer.echo(format_outputs(graph.outputs, color=color))
