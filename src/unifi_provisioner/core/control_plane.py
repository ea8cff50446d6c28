"""Control-plane interface consumed by the provisioning executor."""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from unifi_provisioner.resources.base import Resource


class ObservedStatus(str, Enum):
    ABSENT = "absent"
    PRESENT = "present"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class ControlPlaneError(Exception):
    """Raised by a control plane that rejects or cannot serve a request."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class ControlPlane(Protocol):
    def submit(self, resource: Resource) -> None:
        """Submit a resource specification.

        Returns once the control plane has accepted it.

        Raises:
            ControlPlaneError: If the specification is rejected.
        """

    def observe(self, resource: Resource) -> ObservedStatus:
        """Report the current status of a previously submitted resource."""
