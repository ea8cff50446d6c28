"""Resource graph for the UniFi Network Application stack."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING

from pydantic import ValidationError

from unifi_provisioner.engine.graph import ResourceGraph
from unifi_provisioner.resources import (
    ComputeResources,
    ConfigBundleResource,
    InitJobResource,
    NamespaceResource,
    SecretResource,
    ServicePort,
    VolumeClaimResource,
    WorkloadResource,
)
from unifi_provisioner.resources.base import MANAGED_BY_LABEL

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from unifi_provisioner.core.secrets import SecretBundle

logger = logging.getLogger(__name__)

APP_NAME = "unifi"
SECRET_NAME = "unifi-secret-v3"
INIT_SCRIPT_BUNDLE = "unifi-db-init"
INIT_SCRIPT_KEY = "init-unifi-db.sh"
INIT_JOB_NAME = "unifi-db-init-job-v3"
DATA_CLAIM_NAME = "unifi-data"

UNIFI_PORTS: tuple[ServicePort, ...] = (
    ServicePort(name="https", container_port=8443, service_port=8443),
    ServicePort(name="http", container_port=8080, service_port=8080),
    ServicePort(name="stun", container_port=3478, service_port=3478, protocol="UDP"),
    ServicePort(name="discovery", container_port=10001, service_port=10001, protocol="UDP"),
)

_LABELS = {MANAGED_BY_LABEL: "unifi-provisioner", "app.kubernetes.io/part-of": APP_NAME}
_WORKLOAD_PARAMETERS = (
    "image",
    "timezone",
    "memLimit",
    "memStartup",
    "cpu",
    "memory",
    "cpuLimit",
    "memoryLimit",
)


@contextmanager
def _parameters(cfg: Mapping[str, str], *keys: str) -> Iterator[None]:
    """Report a resource model rejecting a resolved value as a ConfigError on *keys*."""
    try:
        yield
    except ValidationError as exc:
        # Deferred: the config package imports this module.
        from unifi_provisioner.config.resolver import ConfigError

        values = ", ".join(f"{k}={cfg[k]!r}" for k in keys)
        reasons = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise ConfigError(f"Invalid parameter value ({values}): {reasons}") from exc


def build(cfg: Mapping[str, str], secrets: SecretBundle, *, init_script: str) -> ResourceGraph:
    """Build the six-resource graph for the UniFi stack.

    Resources are declared in the order they should be provisioned when
    nothing else constrains it; the workload depends on the init job, so it
    is only submitted once the database has been initialized.

    Raises:
        ConfigError: If a resolved parameter is not a valid value for the
            object it ends up in (e.g. a namespace that is not a DNS label).
        GraphError: If the declared edges do not form a valid graph.
    """
    ns = cfg["namespace"]
    labels = dict(_LABELS)

    with _parameters(cfg, "namespace"):
        namespace = NamespaceResource(name=ns, labels=labels)

    secret = SecretResource(
        name=SECRET_NAME,
        namespace=ns,
        labels=labels,
        string_data=secrets.string_data(),
        depends_on=(namespace.identity,),
    )

    init_script_bundle = ConfigBundleResource(
        name=INIT_SCRIPT_BUNDLE,
        namespace=ns,
        labels=labels,
        data={INIT_SCRIPT_KEY: init_script},
        depends_on=(namespace.identity,),
    )

    with _parameters(cfg, "storageClass", "dataSize"):
        data_claim = VolumeClaimResource(
            name=DATA_CLAIM_NAME,
            namespace=ns,
            labels=labels,
            storage_class_name=cfg["storageClass"],
            size=cfg["dataSize"],
            depends_on=(namespace.identity,),
        )

    with _parameters(cfg, "mongoImage"):
        init_job = InitJobResource(
            name=INIT_JOB_NAME,
            namespace=ns,
            labels=labels,
            image=cfg["mongoImage"],
            container_name="mongo-init",
            script_bundle=init_script_bundle.name,
            script_key=INIT_SCRIPT_KEY,
            env=secrets.admin_env(),
            env_from_secrets=(secret.name,),
            restart_policy="OnFailure",
            depends_on=(namespace.identity, init_script_bundle.identity),
        )

    with _parameters(cfg, *_WORKLOAD_PARAMETERS):
        workload = WorkloadResource(
            name=APP_NAME,
            namespace=ns,
            labels=labels,
            image=cfg["image"],
            ports=UNIFI_PORTS,
            env={
                "PUID": "1000",
                "PGID": "1000",
                "TZ": cfg["timezone"],
                "MEM_LIMIT": cfg["memLimit"],
                "MEM_STARTUP": cfg["memStartup"],
            },
            env_from_secrets=(secret.name,),
            volume_claim=data_claim.name,
            compute=ComputeResources(
                cpu=cfg["cpu"],
                memory=cfg["memory"],
                cpu_limit=cfg["cpuLimit"],
                memory_limit=cfg["memoryLimit"],
            ),
            service_type="LoadBalancer",
            depends_on=(
                namespace.identity,
                secret.identity,
                data_claim.identity,
                init_job.identity,
            ),
        )

    graph = ResourceGraph(
        [namespace, secret, init_script_bundle, data_claim, init_job, workload],
        outputs={"namespace": namespace.name, "service": workload.service_name},
    )
    logger.debug("Built resource graph with %d resources in namespace %s", len(graph), ns)
    return graph
