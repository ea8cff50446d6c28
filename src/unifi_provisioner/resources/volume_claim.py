"""Persistent volume claim resource model."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from unifi_provisioner.resources.base import Resource


class VolumeClaimResource(Resource):
    """A persistent volume claim.

    Ready once the claim exists; binding to a volume is left to the cluster.
    """

    kind: ClassVar[str] = "VolumeClaim"

    storage_class_name: str
    size: str = Field(pattern=r"^[0-9]+(\.[0-9]+)?([EPTGMK]i?|[mk])?$")
    access_modes: tuple[str, ...] = ("ReadWriteOnce",)

    def manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "PersistentVolumeClaim",
            "metadata": self.metadata(),
            "spec": {
                "accessModes": list(self.access_modes),
                "storageClassName": self.storage_class_name,
                "resources": {"requests": {"storage": self.size}},
            },
        }
