"""Config bundle (ConfigMap) resource model."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field

from unifi_provisioner.resources.base import Resource


class ConfigBundleResource(Resource):
    """A ConfigMap carrying file contents, e.g. the database init script."""

    kind: ClassVar[str] = "ConfigBundle"

    data: dict[str, str] = Field(default_factory=dict)

    def manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "ConfigMap",
            "metadata": self.metadata(),
            "data": dict(self.data),
        }
