"""One-shot init job resource model."""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import Field, SecretStr

from unifi_provisioner.core.control_plane import ObservedStatus
from unifi_provisioner.resources.base import Resource


class InitJobResource(Resource):
    """A batch job that runs a script from a config bundle to completion.

    Unlike other kinds, the job is only ready once the control plane reports
    terminal success (its pod exited 0). With ``restart_policy="OnFailure"``
    a failing script is retried by the cluster, so the job is only failed
    once the cluster gives up on it.
    """

    kind: ClassVar[str] = "InitJob"

    image: str
    container_name: str = "init"
    command: tuple[str, ...] = ("/bin/bash",)
    script_bundle: str
    script_key: str
    script_mount_path: str = "/scripts"
    env: dict[str, SecretStr] = Field(default_factory=dict)
    env_from_secrets: tuple[str, ...] = ()
    restart_policy: Literal["OnFailure", "Never"] = "OnFailure"
    backoff_limit: int | None = Field(default=None, ge=0)

    def manifest(self) -> dict[str, Any]:
        container: dict[str, Any] = {
            "name": self.container_name,
            "image": self.image,
            "command": list(self.command),
            "args": [f"{self.script_mount_path}/{self.script_key}"],
            "volumeMounts": [{"name": "init-script", "mountPath": self.script_mount_path}],
        }
        if self.env:
            container["env"] = [
                {"name": k, "value": v.get_secret_value()} for k, v in self.env.items()
            ]
        if self.env_from_secrets:
            container["envFrom"] = [{"secretRef": {"name": s}} for s in self.env_from_secrets]

        spec: dict[str, Any] = {
            "template": {
                "spec": {
                    "restartPolicy": self.restart_policy,
                    "containers": [container],
                    "volumes": [
                        {"name": "init-script", "configMap": {"name": self.script_bundle}}
                    ],
                }
            }
        }
        if self.backoff_limit is not None:
            spec["backoffLimit"] = self.backoff_limit

        return {
            "apiVersion": "batch/v1",
            "kind": "Job",
            "metadata": self.metadata(),
            "spec": spec,
        }

    def is_ready(self, status: ObservedStatus) -> bool:
        return status == ObservedStatus.SUCCEEDED
