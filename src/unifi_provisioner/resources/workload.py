"""Application workload resource model (Deployment + Service)."""

from __future__ import annotations

from typing import Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

from unifi_provisioner.resources.base import Resource


class ServicePort(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    container_port: int = Field(gt=0, lt=65536)
    service_port: int = Field(gt=0, lt=65536)
    protocol: Literal["TCP", "UDP"] = "TCP"


class ComputeResources(BaseModel):
    """Container CPU/memory requests and limits."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    cpu: str | None = None
    memory: str | None = None
    cpu_limit: str | None = None
    memory_limit: str | None = None

    def render(self) -> dict[str, dict[str, str]]:
        r: dict[str, dict[str, str]] = {}
        requests = {k: v for k, v in (("cpu", self.cpu), ("memory", self.memory)) if v}
        limits = {k: v for k, v in (("cpu", self.cpu_limit), ("memory", self.memory_limit)) if v}
        if requests:
            r["requests"] = requests
        if limits:
            r["limits"] = limits
        return r


class WorkloadResource(Resource):
    """The main application: a single-replica Deployment exposed by a Service.

    When a volume claim is mounted the Deployment uses the ``Recreate``
    strategy, since a ReadWriteOnce claim cannot be shared by two pods.
    """

    kind: ClassVar[str] = "Workload"

    image: str
    replicas: int = Field(default=1, ge=0)
    ports: tuple[ServicePort, ...] = ()
    env: dict[str, str] = Field(default_factory=dict)
    env_from_secrets: tuple[str, ...] = ()
    volume_claim: str | None = None
    data_mount_path: str = "/config"
    compute: ComputeResources | None = None
    service_type: Literal["ClusterIP", "NodePort", "LoadBalancer"] = "LoadBalancer"
    service_annotations: dict[str, str] = Field(default_factory=dict)

    @property
    def service_name(self) -> str:
        return self.name

    def _selector(self) -> dict[str, str]:
        return {"app.kubernetes.io/name": self.name}

    def _container(self) -> dict[str, Any]:
        container: dict[str, Any] = {"name": self.name, "image": self.image}
        if self.ports:
            container["ports"] = [
                {"name": p.name, "containerPort": p.container_port, "protocol": p.protocol}
                for p in self.ports
            ]
        if self.env:
            container["env"] = [{"name": k, "value": v} for k, v in self.env.items()]
        if self.env_from_secrets:
            container["envFrom"] = [{"secretRef": {"name": s}} for s in self.env_from_secrets]
        if self.volume_claim:
            container["volumeMounts"] = [{"name": "data", "mountPath": self.data_mount_path}]
        if self.compute is not None:
            resources = self.compute.render()
            if resources:
                container["resources"] = resources
        return container

    def deployment_manifest(self) -> dict[str, Any]:
        pod_labels = {**self.labels, **self._selector()}
        pod_spec: dict[str, Any] = {"containers": [self._container()]}
        if self.volume_claim:
            pod_spec["volumes"] = [
                {"name": "data", "persistentVolumeClaim": {"claimName": self.volume_claim}}
            ]

        spec: dict[str, Any] = {
            "replicas": self.replicas,
            "selector": {"matchLabels": self._selector()},
            "template": {"metadata": {"labels": pod_labels}, "spec": pod_spec},
        }
        if self.volume_claim:
            spec["strategy"] = {"type": "Recreate"}

        return {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": self.metadata(),
            "spec": spec,
        }

    def service_manifest(self) -> dict[str, Any]:
        metadata = self.metadata()
        metadata["name"] = self.service_name
        if self.service_annotations:
            metadata["annotations"] = dict(self.service_annotations)
        return {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": metadata,
            "spec": {
                "type": self.service_type,
                "selector": self._selector(),
                "ports": [
                    {
                        "name": p.name,
                        "port": p.service_port,
                        "targetPort": p.container_port,
                        "protocol": p.protocol,
                    }
                    for p in self.ports
                ],
            },
        }

    def manifest(self) -> dict[str, Any]:
        return self.deployment_manifest()

    def manifests(self) -> list[dict[str, Any]]:
        return [self.deployment_manifest(), self.service_manifest()]
