"""Default handler registry factory."""

from __future__ import annotations

from unifi_provisioner.engine.kube_handlers import (
    ConfigBundleHandler,
    InitJobHandler,
    NamespaceHandler,
    SecretHandler,
    VolumeClaimHandler,
    WorkloadHandler,
)
from unifi_provisioner.engine.registry import HandlerRegistry
from unifi_provisioner.resources import (
    ConfigBundleResource,
    InitJobResource,
    NamespaceResource,
    SecretResource,
    VolumeClaimResource,
    WorkloadResource,
)


def default_registry() -> HandlerRegistry:
    """Create a fresh registry with a handler for every built-in resource kind."""
    registry = HandlerRegistry()

    registry.register(NamespaceResource, NamespaceHandler())
    registry.register(SecretResource, SecretHandler())
    registry.register(ConfigBundleResource, ConfigBundleHandler())
    registry.register(VolumeClaimResource, VolumeClaimHandler())
    registry.register(InitJobResource, InitJobHandler())
    registry.register(WorkloadResource, WorkloadHandler())

    return registry
