"""Engine-facing handler interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

from unifi_provisioner.resources.base import Resource

if TYPE_CHECKING:
    from unifi_provisioner.core.control_plane import ObservedStatus
    from unifi_provisioner.core.provider import KubernetesProvider

R = TypeVar("R", bound=Resource)


@dataclass(frozen=True)
class HandlerContext:
    """Context passed to handlers."""

    provider: KubernetesProvider


class ResourceHandler(Generic[R]):
    """Base class for resource handlers.

    Handlers are responsible for translating resources into Kubernetes API
    calls. Subclass and override both methods; API exceptions propagate and
    are turned into ``ControlPlaneError`` by the control plane.
    """

    def create(self, ctx: HandlerContext, desired: R) -> None:
        """Create the resource. An object that already exists is accepted."""
        raise NotImplementedError

    def read(self, ctx: HandlerContext, desired: R) -> ObservedStatus:
        """Read the resource back and report its status."""
        raise NotImplementedError
