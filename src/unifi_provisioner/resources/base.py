"""Base resource class for Kubernetes resources."""

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, computed_field

from unifi_provisioner.core.control_plane import ObservedStatus

# RFC 1123 label, as required by Kubernetes object names
NAME_PATTERN = r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$"

MANAGED_BY_LABEL = "app.kubernetes.io/managed-by"


class Resource(BaseModel):
    """Base class for all provisioned resources.

    Resources are pure, immutable data - they define the desired state.
    Handlers know how to submit and observe them. Each kind decides what
    "done" means through :meth:`is_ready` and :meth:`is_failed`.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ClassVar[str]

    name: str = Field(pattern=NAME_PATTERN, max_length=63)
    namespace: str | None = Field(default=None, pattern=NAME_PATTERN)
    labels: dict[str, str] = Field(default_factory=dict)

    # Identities of resources that must be ready before this one is submitted
    depends_on: tuple[str, ...] = ()

    @computed_field
    @property
    def identity(self) -> str:
        """Unique identity within a graph (e.g., 'Secret/unifi-secret-v3')."""
        return f"{self.kind}/{self.name}"

    def metadata(self) -> dict[str, Any]:
        meta: dict[str, Any] = {"name": self.name}
        if self.namespace is not None:
            meta["namespace"] = self.namespace
        if self.labels:
            meta["labels"] = dict(self.labels)
        return meta

    def manifest(self) -> dict[str, Any]:
        """Produce the Kubernetes object for this resource."""
        raise NotImplementedError(f"{self.__class__.__name__}.manifest()")

    def manifests(self) -> list[dict[str, Any]]:
        """Return every Kubernetes object this resource expands to."""
        return [self.manifest()]

    def is_ready(self, status: ObservedStatus) -> bool:
        """Existence is enough for most kinds."""
        return status in (ObservedStatus.PRESENT, ObservedStatus.RUNNING, ObservedStatus.SUCCEEDED)

    def is_failed(self, status: ObservedStatus) -> bool:
        return status == ObservedStatus.FAILED
