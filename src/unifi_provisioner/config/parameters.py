"""Recognized stack parameters and their built-in defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Parameter:
    """A named stack parameter.

    ``default=None`` marks the parameter as required: it must then come from
    the stack file or from ``env_var``.
    """

    key: str
    env_var: str
    default: str | None
    secret: bool = False
    description: str = ""


PARAMETERS: tuple[Parameter, ...] = (
    Parameter("namespace", "UNIFI_NAMESPACE", "unifi", description="Target namespace"),
    Parameter(
        "storageClass",
        "UNIFI_STORAGE_CLASS",
        "truenas-hdd-mirror-nfs",
        description="Storage class of the data volume claim",
    ),
    Parameter("dataSize", "UNIFI_DATA_SIZE", "10Gi", description="Size of the data volume"),
    Parameter("timezone", "UNIFI_TIMEZONE", "Europe/Brussels"),
    Parameter("memLimit", "UNIFI_MEM_LIMIT", "1024", description="JVM heap limit (MB)"),
    Parameter("memStartup", "UNIFI_MEM_STARTUP", "1024", description="JVM startup heap (MB)"),
    Parameter("cpu", "UNIFI_CPU", "500m"),
    Parameter("memory", "UNIFI_MEMORY", "1Gi"),
    Parameter("cpuLimit", "UNIFI_CPU_LIMIT", "2"),
    Parameter("memoryLimit", "UNIFI_MEMORY_LIMIT", "2Gi"),
    Parameter(
        "image",
        "UNIFI_IMAGE",
        "lscr.io/linuxserver/unifi-network-application:9.3.45-ls100",
    ),
    Parameter("mongoImage", "MONGODB_IMAGE", "mongo:7.0", description="Init job image"),
    Parameter("mongoUser", "UNIFI_MONGO_USER", "unifi", secret=True),
    Parameter("mongoPassword", "UNIFI_MONGO_PASSWORD", "changeme", secret=True),
    Parameter("mongoHost", "UNIFI_MONGO_HOST", "mongodb.mongodb"),
    Parameter("mongoPort", "UNIFI_MONGO_PORT", "27017"),
    Parameter("mongoDbName", "UNIFI_MONGO_DBNAME", "unifi"),
    Parameter("mongoAuthSource", "UNIFI_MONGO_AUTHSOURCE", "unifi"),
    Parameter("mongoRootUser", "MONGODB_ROOT_USERNAME", "admin", secret=True),
    Parameter("mongoRootPassword", "MONGODB_ROOT_PASSWORD", "changeme", secret=True),
)

DEFAULTS: dict[str, str] = {p.key: p.default for p in PARAMETERS if p.default is not None}

SECRET_KEYS: frozenset[str] = frozenset(p.key for p in PARAMETERS if p.secret)
