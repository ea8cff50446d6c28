"""Dependency-aware provisioning engine."""

from unifi_provisioner.engine.builder import build
from unifi_provisioner.engine.errors import (
    DanglingDependencyError,
    DependencyCycleError,
    DuplicateIdentityError,
    EngineError,
    GraphError,
    ProvisioningCanceled,
    ProvisioningError,
    UnknownResourceKindError,
)
from unifi_provisioner.engine.executor import ProgressCallback, ProvisioningExecutor
from unifi_provisioner.engine.graph import DependencyGraph, ResourceGraph
from unifi_provisioner.engine.handlers import HandlerContext, ResourceHandler
from unifi_provisioner.engine.kube import KubernetesControlPlane
from unifi_provisioner.engine.registry import HandlerRegistry
from unifi_provisioner.engine.types import NodeResult, NodeStatus, ProvisioningReport

__all__ = [
    "DanglingDependencyError",
    "DependencyCycleError",
    "DependencyGraph",
    "DuplicateIdentityError",
    "EngineError",
    "GraphError",
    "HandlerContext",
    "HandlerRegistry",
    "KubernetesControlPlane",
    "NodeResult",
    "NodeStatus",
    "ProgressCallback",
    "ProvisioningCanceled",
    "ProvisioningError",
    "ProvisioningExecutor",
    "ProvisioningReport",
    "ResourceGraph",
    "ResourceHandler",
    "UnknownResourceKindError",
    "build",
]
