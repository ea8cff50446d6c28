"""YAML configuration loading and convenience build/provision API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from unifi_provisioner.config.loader import ConfigError, load_config
from unifi_provisioner.config.registry import default_registry
from unifi_provisioner.config.resolver import ResolvedConfig, resolve
from unifi_provisioner.config.schema import ClusterConfig, Config, ExecutorConfig
from unifi_provisioner.core.provider import KubernetesProvider
from unifi_provisioner.core.secrets import materialize
from unifi_provisioner.engine.builder import build
from unifi_provisioner.engine.executor import ProgressCallback, ProvisioningExecutor
from unifi_provisioner.engine.kube import KubernetesControlPlane

if TYPE_CHECKING:
    from pathlib import Path

    from unifi_provisioner.core.control_plane import ControlPlane
    from unifi_provisioner.engine.graph import ResourceGraph
    from unifi_provisioner.engine.types import ProvisioningReport

__all__ = [
    "ClusterConfig",
    "Config",
    "ConfigError",
    "ExecutorConfig",
    "ResolvedConfig",
    "build_graph",
    "control_plane",
    "load",
    "load_config",
    "provision",
    "resolve",
]


def load(path: Path | str) -> Config:
    """Load a YAML stack file."""
    return load_config(path)


def build_graph(config: Config) -> ResourceGraph:
    """Materialize secrets and build the resource graph for a loaded config."""
    secrets = materialize(config.resolved)
    return build(config.resolved, secrets, init_script=config.init_script_text)


def control_plane(config: Config) -> KubernetesControlPlane:
    """Build a Kubernetes control plane from the ``cluster`` section."""
    provider = KubernetesProvider(
        kubeconfig=config.cluster.kubeconfig,
        context=config.cluster.context,
        in_cluster=config.cluster.in_cluster,
    )
    return KubernetesControlPlane(provider=provider, registry=default_registry())


def provision(
    config: Config,
    *,
    target: ControlPlane | None = None,
    parallelism: int | None = None,
    progress: ProgressCallback | None = None,
) -> ProvisioningReport:
    """Build the graph and provision it (against the configured cluster by default).

    The graph is fully built and validated before anything is submitted.
    """
    graph = build_graph(config)
    executor = ProvisioningExecutor(
        target if target is not None else control_plane(config),
        parallelism=parallelism or config.executor.parallelism,
        timeout=config.executor.timeout,
        poll_interval=config.executor.poll_interval,
        progress=progress,
    )
    return executor.provision(graph)
