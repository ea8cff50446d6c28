"""Namespace resource model."""

from __future__ import annotations

from typing import Any, ClassVar

from unifi_provisioner.resources.base import Resource


class NamespaceResource(Resource):
    """A cluster-scoped namespace that every other resource lives in."""

    kind: ClassVar[str] = "Namespace"

    def manifest(self) -> dict[str, Any]:
        return {"apiVersion": "v1", "kind": "Namespace", "metadata": self.metadata()}
