"""Core infrastructure components for the UniFi provisioner."""

from unifi_provisioner.core.control_plane import ControlPlane, ControlPlaneError, ObservedStatus
from unifi_provisioner.core.provider import KubernetesProvider
from unifi_provisioner.core.secrets import SecretBundle, encode_credential, materialize

__all__ = [
    "ControlPlane",
    "ControlPlaneError",
    "KubernetesProvider",
    "ObservedStatus",
    "SecretBundle",
    "encode_credential",
    "materialize",
]
