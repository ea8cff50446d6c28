"""Resource definitions."""

from unifi_provisioner.resources.base import Resource
from unifi_provisioner.resources.config_bundle import ConfigBundleResource
from unifi_provisioner.resources.init_job import InitJobResource
from unifi_provisioner.resources.namespace import NamespaceResource
from unifi_provisioner.resources.secret import SecretResource
from unifi_provisioner.resources.volume_claim import VolumeClaimResource
from unifi_provisioner.resources.workload import ComputeResources, ServicePort, WorkloadResource

__all__ = [
    "ComputeResources",
    "ConfigBundleResource",
    "InitJobResource",
    "NamespaceResource",
    "Resource",
    "SecretResource",
    "ServicePort",
    "VolumeClaimResource",
    "WorkloadResource",
]
