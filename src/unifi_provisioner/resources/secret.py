"""Opaque secret resource model."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import Field, SecretStr

from unifi_provisioner.resources.base import Resource


class SecretResource(Resource):
    """An ``Opaque`` secret holding the application's connection values.

    Values stay wrapped in ``SecretStr`` until the manifest is rendered.
    """

    kind: ClassVar[str] = "Secret"

    secret_type: str = "Opaque"
    string_data: dict[str, SecretStr] = Field(default_factory=dict)

    def manifest(self) -> dict[str, Any]:
        return {
            "apiVersion": "v1",
            "kind": "Secret",
            "metadata": self.metadata(),
            "type": self.secret_type,
            "stringData": {k: v.get_secret_value() for k, v in self.string_data.items()},
        }
